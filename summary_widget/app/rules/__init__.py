"""
Rules engine package.

Defines the condition model, the operation catalog and the evaluation
engine used by the Summary Widget. Conditions are composed with the
``any``/``all`` aggregation modes, or delegated to a host expression
evaluator in ``js`` mode.

Modules of interest:
- models: Value types, conditions, rule sets and tri-state results.
- operations: Operation registry, input validators and value coercion.
- engine: ConditionEvaluator with execution and introspection.
"""

from .engine import ConditionEvaluator
from .models import Condition, ConditionResult, EvaluationMode, InputType, RuleSet, ValueType
from .operations import OPERATIONS, Operation, OperationRegistry

__all__ = [
    "ConditionEvaluator",
    "Condition",
    "ConditionResult",
    "EvaluationMode",
    "InputType",
    "RuleSet",
    "ValueType",
    "OPERATIONS",
    "Operation",
    "OperationRegistry",
]
