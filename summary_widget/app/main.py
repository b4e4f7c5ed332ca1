"""
Summary Widget condition engine entry point.
"""

from typing import Any, Mapping, Optional, Union

from shared.config import EvaluatorConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import get_metrics_collector

from .cache.value_cache import TelemetryCache
from .rules.engine import ConditionEvaluator, ExpressionEvaluator

SERVICE_NAME = "summary_widget"


def create_evaluator(
    subscription_cache: Optional[TelemetryCache] = None,
    composition_objects: Optional[Mapping[Union[str, int], Any]] = None,
    expression_evaluator: Optional[ExpressionEvaluator] = None,
    config: Optional[EvaluatorConfig] = None,
) -> ConditionEvaluator:
    """Create a ConditionEvaluator with logging and metrics configured."""
    config = config or get_config()
    configure_logging(SERVICE_NAME, config.log_level)

    metrics = get_metrics_collector(SERVICE_NAME) if config.enable_metrics else None
    evaluator = ConditionEvaluator(
        subscription_cache,
        composition_objects,
        expression_evaluator=expression_evaluator,
        config=config,
        metrics=metrics,
    )

    get_logger(f"{SERVICE_NAME}.main").info(
        "Condition evaluator created",
        env=config.env,
        operations=len(evaluator.registry),
        metrics_enabled=metrics is not None,
        expression_evaluator=expression_evaluator is not None,
    )
    return evaluator
