from .breakout_config import BreakoutConfigResult, calculate_effective_capacity, validate_breakout_configuration
from .evaluation import EvaluationOptions, IntegrationHook, IntegrationResult, TopologyEvaluation, evaluate_topology
from .rules import evaluate

__all__ = [
    "BreakoutConfigResult",
    "EvaluationOptions",
    "IntegrationHook",
    "IntegrationResult",
    "TopologyEvaluation",
    "calculate_effective_capacity",
    "evaluate",
    "evaluate_topology",
    "validate_breakout_configuration",
]
