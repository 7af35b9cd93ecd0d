"""
Full topology evaluation: core rules, breakout configuration checks and
optional external integration hooks.

Integration hooks only ever add ``integration_results``; the core rule lists
are computed before any hook runs and are the same with hooks on or off.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, computed_field

from fabricplan_core.data.catalog import DefaultSwitchCatalog, SwitchCatalog, SwitchProfileSource
from fabricplan_core.models.policy import PlanningPolicy
from fabricplan_core.models.records import DerivedTopology, FabricSpec
from fabricplan_core.models.violations import RuleEvaluationResult, RuleViolation
from fabricplan_core.validation.breakout_config import BreakoutConfigResult, validate_breakout_configuration
from fabricplan_core.validation.rules import evaluate

_logger = logging.getLogger("fabricplan.evaluation")


class IntegrationResult(BaseModel):
    """Outcome of one external validation hook."""

    model_config = ConfigDict(extra="ignore")
    name: str
    passed: bool
    skipped: bool = False
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class IntegrationHook(Protocol):
    name: str

    def run(self, spec: FabricSpec, derived: DerivedTopology) -> IntegrationResult: ...


@dataclass(frozen=True)
class EvaluationOptions:
    enable_integrations: bool = False
    hooks: tuple[IntegrationHook, ...] = field(default_factory=tuple)
    policy: PlanningPolicy | None = None


class TopologySummary(BaseModel):
    model_config = ConfigDict(frozen=True)
    total_issues: int
    blocking_errors: int
    improvement_warnings: int
    informational: int
    has_integration_validation: bool


class TopologyEvaluation(BaseModel):
    """Core rule results plus breakout checks and integration results."""

    model_config = ConfigDict(extra="ignore")
    core: RuleEvaluationResult
    breakout: BreakoutConfigResult | None = None
    integration_results: dict[str, IntegrationResult] | None = None

    def _collect(self, severity: str) -> list[RuleViolation]:
        extra = [v for v in self.breakout.violations if v.severity == severity] if self.breakout else []
        core = {"error": self.core.errors, "warning": self.core.warnings, "info": self.core.info}[severity]
        return [*core, *extra]

    @property
    def errors(self) -> list[RuleViolation]:
        return self._collect("error")

    @property
    def warnings(self) -> list[RuleViolation]:
        return self._collect("warning")

    @property
    def info(self) -> list[RuleViolation]:
        return self._collect("info")

    @property
    def has_blocking_errors(self) -> bool:
        failed_hooks = any(not r.passed and not r.skipped for r in (self.integration_results or {}).values())
        return bool(self.errors) or failed_hooks

    @computed_field
    @property
    def summary(self) -> TopologySummary:
        errors, warnings, info = self.errors, self.warnings, self.info
        return TopologySummary(
            total_issues=len(errors) + len(warnings) + len(info),
            blocking_errors=len(errors),
            improvement_warnings=len(warnings),
            informational=len(info),
            has_integration_validation=self.integration_results is not None,
        )


def _run_hook(hook: IntegrationHook, spec: FabricSpec, derived: DerivedTopology) -> IntegrationResult:
    try:
        return hook.run(spec, derived)
    except Exception as e:
        _logger.warning("integration %s failed: %s", hook.name, e)
        return IntegrationResult(name=hook.name, passed=False, message=f"{type(e).__name__}: {e}")


def evaluate_topology(
    spec: FabricSpec,
    derived: DerivedTopology,
    catalog: SwitchCatalog | None = None,
    options: EvaluationOptions | None = None,
) -> TopologyEvaluation:
    """
    Evaluate ``spec`` with the core rules, the breakout checks and any enabled hooks.

    Breakout checks run only when the catalog can hand out full switch
    profiles. Hooks run only with ``options.enable_integrations``; a hook that
    raises is recorded as a failed result rather than aborting evaluation.
    """
    if catalog is None:
        catalog = DefaultSwitchCatalog()
    options = options or EvaluationOptions()

    core = evaluate(spec, derived, catalog, options.policy)

    breakout = None
    if isinstance(catalog, SwitchProfileSource):
        breakout = validate_breakout_configuration(spec, catalog.switch_profiles(), options.policy)

    integration_results = None
    if options.enable_integrations:
        integration_results = {}
        for hook in options.hooks:
            _logger.info("running integration %s", hook.name)
            integration_results[hook.name] = _run_hook(hook, spec, derived)

    return TopologyEvaluation(core=core, breakout=breakout, integration_results=integration_results)
