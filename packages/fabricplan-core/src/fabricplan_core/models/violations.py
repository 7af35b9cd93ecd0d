"""Structured rule violations produced by the rule engine.

Each rule code owns a typed context model; ``RuleViolation.context`` is a
tagged union discriminated on the context's ``rule`` field.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from fabricplan_core.models.records import SwitchRole

Severity = Literal["error", "warning", "info"]

RuleCode = Literal[
    "SPINE_CAPACITY_EXCEEDED",
    "LEAF_CAPACITY_EXCEEDED",
    "UPLINKS_NOT_DIVISIBLE_BY_SPINES",
    "MC_LAG_ODD_LEAFS",
    "ES_LAG_SINGLE_NIC",
    "MODEL_PROFILE_MISMATCH",
    "BREAKOUT_UNSUPPORTED",
    "BREAKOUT_MIXED_USAGE",
    "BREAKOUT_CAPACITY_IMBALANCE",
    "BREAKOUT_RECOMMENDED",
]

_CONTEXT_CONFIG = ConfigDict(extra="forbid", frozen=True)


class Remediation(BaseModel):
    """Actionable guidance: what to change, how to change it, and why it matters."""

    model_config = _CONTEXT_CONFIG
    what: str = Field(min_length=1)
    how: str = Field(min_length=1)
    why: str = Field(min_length=1)


# ---- spine capacity ----


class ClassUplinks(BaseModel):
    model_config = _CONTEXT_CONFIG
    leaf_class_id: str | None = None
    leaves: int
    uplinks_per_leaf: int
    total: int


class SpineCapacityCalculations(BaseModel):
    model_config = _CONTEXT_CONFIG
    shortfall: int
    additional_spines_needed: int
    min_spines_for_capacity: int
    class_breakdown: tuple[ClassUplinks, ...] = ()


class SpineCapacityContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["SPINE_CAPACITY_EXCEEDED"] = "SPINE_CAPACITY_EXCEEDED"
    expected: int
    actual: int
    spine_count: int
    ports_per_spine: int
    calculations: SpineCapacityCalculations


# ---- leaf capacity ----


class LeafCapacityCalculations(BaseModel):
    model_config = _CONTEXT_CONFIG
    shortfall: int
    additional_leaves_needed: int
    min_leaves_for_capacity: int


class LeafCapacityContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["LEAF_CAPACITY_EXCEEDED"] = "LEAF_CAPACITY_EXCEEDED"
    expected: int
    actual: int
    leaf_count: int
    ports_per_leaf: int
    leaf_class_id: str | None = None
    calculations: LeafCapacityCalculations


# ---- uplink divisibility ----


class UplinkDivisibilityCalculations(BaseModel):
    model_config = _CONTEXT_CONFIG
    remainder: int
    spine_count: int
    optimal_counts: tuple[int, ...]


class UplinkDivisibilityContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["UPLINKS_NOT_DIVISIBLE_BY_SPINES"] = "UPLINKS_NOT_DIVISIBLE_BY_SPINES"
    uplinks_per_leaf: int
    spine_count: int
    remainder: int
    calculations: UplinkDivisibilityCalculations


# ---- MC-LAG / ES-LAG ----


class McLagCalculations(BaseModel):
    model_config = _CONTEXT_CONFIG
    suggested_count: int
    pairs_needed: int


class McLagContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["MC_LAG_ODD_LEAFS"] = "MC_LAG_ODD_LEAFS"
    leaf_count: int
    mc_lag_enabled: Literal[True] = True
    expected: str = "even number >= 2"
    calculations: McLagCalculations


class EsLagCalculations(BaseModel):
    model_config = _CONTEXT_CONFIG
    nic_count: int
    suggested_nics: int = 2


class EsLagContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["ES_LAG_SINGLE_NIC"] = "ES_LAG_SINGLE_NIC"
    profile_name: str
    nic_count: int
    es_lag_enabled: Literal[True] = True
    expected: str = "nics >= 2"
    calculations: EsLagCalculations


# ---- model / profile ----


class ModelProfileContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["MODEL_PROFILE_MISMATCH"] = "MODEL_PROFILE_MISMATCH"
    model_id: str
    role: SwitchRole
    recommended: tuple[str, ...]
    profile_types: tuple[str, ...] = ()


# ---- breakout configuration ----


class BreakoutUnsupportedContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["BREAKOUT_UNSUPPORTED"] = "BREAKOUT_UNSUPPORTED"
    model_id: str
    profile_known: bool


class BreakoutMixedUsageContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["BREAKOUT_MIXED_USAGE"] = "BREAKOUT_MIXED_USAGE"
    enabled_classes: tuple[str, ...]
    disabled_classes: tuple[str, ...]


class BreakoutCapacityImbalanceContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["BREAKOUT_CAPACITY_IMBALANCE"] = "BREAKOUT_CAPACITY_IMBALANCE"
    min_capacity: int
    max_capacity: int
    low_classes: tuple[str, ...]
    high_classes: tuple[str, ...]


class BreakoutRecommendedContext(BaseModel):
    model_config = _CONTEXT_CONFIG
    rule: Literal["BREAKOUT_RECOMMENDED"] = "BREAKOUT_RECOMMENDED"
    model_id: str
    base_capacity: int
    current_utilization: float
    utilization_with_breakout: float
    breakout_type: str | None = None


ViolationContext = Annotated[
    Union[
        SpineCapacityContext,
        LeafCapacityContext,
        UplinkDivisibilityContext,
        McLagContext,
        EsLagContext,
        ModelProfileContext,
        BreakoutUnsupportedContext,
        BreakoutMixedUsageContext,
        BreakoutCapacityImbalanceContext,
        BreakoutRecommendedContext,
    ],
    Field(discriminator="rule"),
]


class RuleViolation(BaseModel):
    """One detected condition. Never references or mutates the evaluated spec."""

    model_config = ConfigDict(extra="forbid", frozen=True)
    code: RuleCode
    severity: Severity
    title: str
    message: str
    leaf_class_id: str | None = None
    context: ViolationContext
    remediation: Remediation | None = None
    affected_fields: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.context.rule != self.code:
            raise ValueError(f"context for {self.context.rule} attached to violation {self.code}")
        if self.severity == "error" and self.remediation is None:
            raise ValueError(f"error {self.code} must carry a remediation")
        return self


class EvaluationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)
    total_issues: int
    blocking_errors: int
    improvement_warnings: int
    informational: int


class RuleEvaluationResult(BaseModel):
    """Violations grouped by severity."""

    model_config = ConfigDict(extra="ignore")
    errors: list[RuleViolation] = Field(default_factory=list)
    warnings: list[RuleViolation] = Field(default_factory=list)
    info: list[RuleViolation] = Field(default_factory=list)

    def add(self, violation: RuleViolation) -> None:
        bucket = {"error": self.errors, "warning": self.warnings, "info": self.info}[violation.severity]
        bucket.append(violation)

    def extend(self, violations) -> None:
        for violation in violations:
            self.add(violation)

    @property
    def violations(self) -> list[RuleViolation]:
        return [*self.errors, *self.warnings, *self.info]

    @property
    def has_blocking_errors(self) -> bool:
        return bool(self.errors)

    @computed_field
    @property
    def summary(self) -> EvaluationSummary:
        return EvaluationSummary(
            total_issues=len(self.errors) + len(self.warnings) + len(self.info),
            blocking_errors=len(self.errors),
            improvement_warnings=len(self.warnings),
            informational=len(self.info),
        )

    def codes(self) -> list[str]:
        return [violation.code for violation in self.violations]
