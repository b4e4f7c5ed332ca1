"""
Condition data models for the Summary Widget condition engine.
"""

from typing import Any, List, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

OperandValue = Union[str, int, float]


class ValueType(str, Enum):
    """Semantic value types an operation can apply to."""
    NUMBER = "number"
    STRING = "string"
    ENUM = "enum"


class InputType(str, Enum):
    """HTML input types generated for each value type."""
    NUMBER = "number"
    TEXT = "text"
    SELECT = "select"


# Maps value types to the input fields conditions expecting them render with
INPUT_TYPES = {
    ValueType.NUMBER: InputType.NUMBER,
    ValueType.STRING: InputType.TEXT,
    ValueType.ENUM: InputType.SELECT,
}


class EvaluationMode(str, Enum):
    """Rule set aggregation modes."""
    ANY = "any"
    ALL = "all"
    JS = "js"


class FanOut(str, Enum):
    """Condition object sentinels addressing every composition object."""
    ANY = "any"
    ALL = "all"


class ConditionResult(str, Enum):
    """Tri-state outcome of a single condition."""
    TRUE = "true"
    FALSE = "false"
    UNDEFINED = "undefined"

    @classmethod
    def from_bool(cls, value: bool) -> "ConditionResult":
        return cls.TRUE if value else cls.FALSE

    @property
    def is_defined(self) -> bool:
        return self is not ConditionResult.UNDEFINED


class Condition(BaseModel):
    """One comparison clause of a widget rule."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    object: Union[str, int] = Field(..., description="Composition object id, or the 'any'/'all' fan-out sentinel")
    key: str = Field(..., description="Telemetry field key")
    operation: str = Field(..., description="Operation key")
    values: List[Any] = Field(default_factory=list, description="Literal comparison values")

    @property
    def fan_out(self) -> Optional[FanOut]:
        """The fan-out sentinel this condition addresses, if any."""
        if self.object == FanOut.ANY.value:
            return FanOut.ANY
        if self.object == FanOut.ALL.value:
            return FanOut.ALL
        return None


class RuleSet(BaseModel):
    """Ordered conditions plus the mode used to aggregate them.

    In ``js`` mode ``expression`` holds the boolean expression handed to the
    host's expression evaluator and ``conditions`` is ignored.
    """

    conditions: List[Condition] = Field(default_factory=list)
    mode: EvaluationMode = EvaluationMode.ANY
    expression: str = ""
