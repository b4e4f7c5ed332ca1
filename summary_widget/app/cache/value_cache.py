"""
Value sources for the Summary Widget condition engine.

A value source answers "what is the latest value of field ``key`` for
composition object ``entity_id``". The engine never owns the underlying
caches: the subscription cache is populated by the host's telemetry
subscriptions and the test cache by the rule editor's test-data panel.
"""

from typing import Any, Mapping, Optional, Protocol, Union

TelemetryCache = Mapping[Union[str, int], Mapping[str, Any]]


class ValueSource(Protocol):
    """Anything that can resolve a telemetry value for an object and key."""

    name: str

    def get_value(self, entity_id: Union[str, int], key: str) -> Any:
        """Return the current value, or ``None`` when it is absent."""
        ...


class MappingValueSource:
    """Value source reading through to a host-owned telemetry cache.

    The mapping is consulted on every lookup and never copied, so hosts may
    mutate it in place between evaluations.
    """

    def __init__(self, cache: Optional[TelemetryCache] = None, name: str = "live"):
        self.cache = cache if cache is not None else {}
        self.name = name

    def get_value(self, entity_id: Union[str, int], key: str) -> Any:
        entry = self.cache.get(entity_id)
        if not isinstance(entry, Mapping):
            return None
        return entry.get(key)

    @classmethod
    def live(cls, cache: Optional[TelemetryCache]) -> "MappingValueSource":
        """Wrap the subscription cache."""
        return cls(cache, name="live")

    @classmethod
    def for_test_data(cls, cache: Optional[TelemetryCache]) -> "MappingValueSource":
        """Wrap a test data cache."""
        return cls(cache, name="test")

    def __repr__(self) -> str:
        return f"MappingValueSource(name={self.name!r}, objects={len(self.cache)})"
