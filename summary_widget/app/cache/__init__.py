"""
Cache package for the Summary Widget condition engine.

Provides value sources that read telemetry from the host's subscription
cache or from a test data cache without taking ownership of either.
"""
