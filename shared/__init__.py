"""
Shared utilities for the Summary Widget condition engine.

This package aggregates common building blocks consumed by the engine:

- config: Evaluator configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Do not import from summary_widget into shared/.
"""
