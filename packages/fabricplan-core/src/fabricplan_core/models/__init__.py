from .policy import PlanningPolicy
from .records import (
    DerivedTopology,
    EndpointProfile,
    FabricSpec,
    LeafClass,
    ModelProfile,
    SwitchModelInfo,
    SwitchProfile,
)
from .violations import Remediation, RuleEvaluationResult, RuleViolation

__all__ = [
    "DerivedTopology",
    "EndpointProfile",
    "FabricSpec",
    "LeafClass",
    "ModelProfile",
    "PlanningPolicy",
    "Remediation",
    "RuleEvaluationResult",
    "RuleViolation",
    "SwitchModelInfo",
    "SwitchProfile",
]
