# fabricplan_core/models/policy.py
from pydantic import BaseModel, ConfigDict, Field


class PlanningPolicy(BaseModel):
    """Tunable thresholds for the calculator's advisory checks and breakout checks."""

    model_config = ConfigDict(extra="ignore")
    max_oversubscription_ratio: float = Field(default=4.0, gt=0)
    # uplinks above this fraction of a leaf's ports are flagged
    max_uplink_fraction: float = Field(default=0.5, gt=0, le=1.0)
    # fallback port counts when the catalog has no entry (DS2000 / DS3000)
    default_leaf_ports: int = Field(default=48, ge=1)
    default_spine_ports: int = Field(default=32, ge=1)
    breakout_recommendation_threshold: float = Field(default=0.8, gt=0)
    capacity_imbalance_factor: float = Field(default=2.0, ge=1.0)
