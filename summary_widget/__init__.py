"""
Summary Widget condition engine.

This package evaluates the rules that drive a summary widget's state. It
provides:

- app.main: Factory wiring configuration, logging and metrics into an evaluator.
- app.rules: Operation registry, condition models and the evaluation engine.
- app.cache: Value sources over the live subscription cache and test data.

Guidelines:
- The engine is stateless between calls; caches are owned by the host.
- Keep evaluation synchronous and deterministic.
- A condition that cannot be evaluated never decides a rule on its own.
"""
