"""
Condition evaluation engine for the Summary Widget.
"""

from contextlib import nullcontext
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from shared.config import EvaluatorConfig, get_config
from shared.errors import MalformedConditionError
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from ..cache.value_cache import MappingValueSource, TelemetryCache, ValueSource
from .models import (
    INPUT_TYPES, Condition, ConditionResult, EvaluationMode, FanOut,
    InputType, OperandValue, RuleSet, ValueType
)
from .operations import OperationRegistry, coerce_value

ExpressionEvaluator = Callable[[str], bool]
ConditionLike = Union[Condition, Mapping[str, Any]]


class ConditionEvaluator:
    """Maintains the widget's condition operations and evaluates rule conditions.

    ``subscription_cache`` holds the latest telemetry for every object in the
    widget's composition; ``composition_objects`` is the set of objects
    addressed by ``any``/``all`` conditions. Both are owned by the host and
    only ever read here, so either may be replaced between calls.
    """

    def __init__(
        self,
        subscription_cache: Optional[TelemetryCache] = None,
        composition_objects: Optional[Mapping[Union[str, int], Any]] = None,
        expression_evaluator: Optional[ExpressionEvaluator] = None,
        config: Optional[EvaluatorConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.logger = get_logger("summary_widget.rules.engine")
        self.config = config or get_config()
        self.subscription_cache = subscription_cache if subscription_cache is not None else {}
        self.composition_objects = composition_objects if composition_objects is not None else {}
        self.expression_evaluator = expression_evaluator

        self.test_cache: TelemetryCache = {}
        self.use_test_cache = False

        self.registry = OperationRegistry()

        if metrics is None and self.config.enable_metrics:
            metrics = get_metrics_collector("summary_widget")
        self.metrics = metrics

    # ------------------------------------------------------------------
    # Rule execution
    # ------------------------------------------------------------------

    def execute(
        self,
        conditions: Union[Iterable[ConditionLike], str, None],
        mode: Union[EvaluationMode, str],
        source: Optional[ValueSource] = None,
    ) -> bool:
        """Evaluate conditions and return the boolean value of the rule.

        ``any`` is true if any defined condition is true (logical OR),
        ``all`` only if every defined condition is true (logical AND), and
        ``js`` hands ``conditions`` (an expression string) to the host's
        expression evaluator. Conditions that cannot be evaluated are left
        out of the aggregate; a rule with no evaluable conditions is false.
        """
        try:
            mode = EvaluationMode(mode)
        except ValueError:
            self.logger.warning("Unknown evaluation mode", mode=mode)
            return False

        if mode is EvaluationMode.JS:
            active = self._execute_expression(conditions)
        else:
            with self._timed(mode):
                active = self._aggregate(
                    [self.evaluate_condition(condition, source) for condition in conditions or []],
                    mode
                )

        if self.metrics:
            self.metrics.record_rule(mode.value, active)

        self.logger.debug("Rule evaluation result", mode=mode.value, active=active)
        return active

    def execute_rule_set(self, rule_set: Union[RuleSet, Mapping[str, Any]], source: Optional[ValueSource] = None) -> bool:
        """Evaluate a stored rule set."""
        if not isinstance(rule_set, RuleSet):
            rule_set = RuleSet.model_validate(rule_set)

        if rule_set.mode is EvaluationMode.JS:
            return self.execute(rule_set.expression, rule_set.mode, source)
        return self.execute(rule_set.conditions, rule_set.mode, source)

    def evaluate_condition(self, condition: ConditionLike, source: Optional[ValueSource] = None) -> ConditionResult:
        """Evaluate one condition, fanning out over the composition if requested."""
        if not isinstance(condition, Condition):
            try:
                condition = Condition.model_validate(condition)
            except ValidationError as e:
                self._skip_malformed(MalformedConditionError(
                    "Invalid condition payload",
                    details={"reason": "invalid_payload", "errors": e.error_count()}
                ))
                return self._record(ConditionResult.UNDEFINED)

        source = source or self._active_source()
        fan_out = condition.fan_out

        if fan_out is None:
            result = self._evaluate_for_object(condition.object, condition, source)
        else:
            result = self._evaluate_fan_out(fan_out, condition, source)

        return self._record(result)

    def _evaluate_fan_out(self, fan_out: FanOut, condition: Condition, source: ValueSource) -> ConditionResult:
        outcomes: List[bool] = []

        for object_id in list(self.composition_objects):
            result = self._evaluate_for_object(object_id, condition, source)
            if result.is_defined:
                outcomes.append(result is ConditionResult.TRUE)

        if not outcomes:
            return ConditionResult.UNDEFINED

        if fan_out is FanOut.ANY:
            return ConditionResult.from_bool(any(outcomes))
        return ConditionResult.from_bool(all(outcomes))

    def _evaluate_for_object(self, object_id: Union[str, int], condition: Condition, source: ValueSource) -> ConditionResult:
        try:
            return ConditionResult.from_bool(self.execute_condition(
                object_id, condition.key, condition.operation, condition.values, source
            ))
        except MalformedConditionError as e:
            self._skip_malformed(e)
            return ConditionResult.UNDEFINED

    @staticmethod
    def _aggregate(results: Sequence[ConditionResult], mode: EvaluationMode) -> bool:
        defined = [result is ConditionResult.TRUE for result in results if result.is_defined]
        if not defined:
            return False
        if mode is EvaluationMode.ANY:
            return any(defined)
        return all(defined)

    def _execute_expression(self, expression: Any) -> bool:
        if self.expression_evaluator is None:
            self.logger.warning("No expression evaluator configured for js mode")
            return False

        try:
            return bool(self.expression_evaluator(expression))
        except Exception as e:
            self.logger.error("Expression evaluation error", error=str(e))
            return False

    # ------------------------------------------------------------------
    # Condition execution
    # ------------------------------------------------------------------

    def execute_condition(
        self,
        object_id: Union[str, int],
        key: str,
        operation: str,
        values: Optional[Sequence[OperandValue]],
        source: Optional[ValueSource] = None,
    ) -> bool:
        """Execute a single condition against one composition object.

        Raises:
            MalformedConditionError: the operation is unknown, the telemetry
                value is absent for an operation that needs it, or the
                comparison values are missing or of the wrong type.
        """
        source = source or self._active_source()
        telemetry_value = coerce_value(source.get_value(object_id, key))
        op = self.registry.get(operation)
        details: Dict[str, Any] = {"object": object_id, "key": key, "operation": operation}

        if op is None:
            raise MalformedConditionError("Unknown operation", details={**details, "reason": "unknown_operation"})

        if telemetry_value is None and not op.accepts_missing:
            raise MalformedConditionError("Telemetry value is undefined", details={**details, "reason": "missing_value"})

        comparison_values = list(values) if values is not None else []
        if len(comparison_values) < op.input_count:
            raise MalformedConditionError(
                "Missing comparison values",
                details={**details, "reason": "missing_operand", "expected": op.input_count}
            )

        inputs = [telemetry_value] + comparison_values
        if not op.validate(inputs):
            raise MalformedConditionError("Invalid input types", details={**details, "reason": "invalid_type"})

        return bool(op.predicate(inputs))

    # ------------------------------------------------------------------
    # Operation introspection
    # ------------------------------------------------------------------

    def get_operation_keys(self) -> List[str]:
        """Get the keys of operations supported by this evaluator."""
        return self.registry.keys()

    def get_operation_text(self, key: str) -> Optional[str]:
        """Get the human-readable label of an operation."""
        return self.registry.label(key)

    def operation_applies_to(self, key: str, value_type: Union[ValueType, str]) -> bool:
        """True only if the operation applies to the given value type."""
        return self.registry.applies_to(key, value_type)

    def get_input_count(self, key: str) -> Optional[int]:
        """Number of comparison values an operation requires."""
        return self.registry.input_count(key)

    def get_operation_description(self, key: str, values: Optional[Sequence[OperandValue]] = None) -> Optional[str]:
        """Shorthand description of an operation for a rule header."""
        return self.registry.describe(key, values)

    def get_input_type(self, key: str) -> Optional[InputType]:
        """HTML input type for an operation's comparison values."""
        return self.registry.input_type(key)

    def get_input_type_by_id(self, value_type: Union[ValueType, str]) -> Optional[InputType]:
        """HTML input type associated with a value type."""
        try:
            return INPUT_TYPES.get(ValueType(value_type))
        except ValueError:
            return None

    def get_operations_for_type(self, value_type: Union[ValueType, str]) -> List[str]:
        """Keys of the operations that may be used on a value type."""
        return self.registry.keys_for_type(value_type)

    # ------------------------------------------------------------------
    # Value sources
    # ------------------------------------------------------------------

    def set_subscription_cache(self, subscription_cache: TelemetryCache):
        self.subscription_cache = subscription_cache

    def set_composition_objects(self, composition_objects: Mapping[Union[str, int], Any]):
        self.composition_objects = composition_objects

    def set_test_data_cache(self, test_cache: TelemetryCache):
        """Set the test data cache, shaped like the subscription cache."""
        self.test_cache = test_cache if test_cache is not None else {}

    def use_test_data(self, use_test_cache: bool):
        """Read values from the test data cache instead of the subscription cache."""
        self.use_test_cache = bool(use_test_cache)
        self.logger.debug("Value source switched", source=self._active_source().name)

    def _active_source(self) -> MappingValueSource:
        if self.use_test_cache:
            return MappingValueSource.for_test_data(self.test_cache)
        return MappingValueSource.live(self.subscription_cache)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def _skip_malformed(self, error: MalformedConditionError):
        if self.config.log_malformed_conditions:
            self.logger.debug("Malformed condition skipped", message=error.message, **error.details)
        if self.metrics:
            self.metrics.record_malformed(error.reason)

    def _record(self, result: ConditionResult) -> ConditionResult:
        if self.metrics:
            self.metrics.record_condition(result.value)
        return result

    def _timed(self, mode: EvaluationMode):
        if self.metrics:
            return self.metrics.time_operation("rule_evaluation_duration_seconds", mode=mode.value)
        return nullcontext()

