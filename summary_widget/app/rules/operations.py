"""
Operation registry for the Summary Widget condition engine.

Each operation is an immutable entry carrying its predicate, the value types
it applies to, the number of comparison values it consumes, a label for
operation pickers and a description template for rule headers.

Predicates are invoked with a sequence of inputs where ``inputs[0]`` is the
telemetry value (``None`` when absent) and ``inputs[1:]`` are the comparison
values in rule order.
"""

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .models import INPUT_TYPES, InputType, OperandValue, ValueType

_NUMERIC_TEXT = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def is_number(value: Any) -> bool:
    """True for ints and floats; bools are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_number_input(inputs: Sequence[Any]) -> bool:
    """True only if every input is numeric."""
    return all(is_number(value) for value in inputs)


def validate_string_input(inputs: Sequence[Any]) -> bool:
    """True only if every input is a string."""
    return all(isinstance(value, str) for value in inputs)


# Invoked before the corresponding operation is executed
INPUT_VALIDATORS: Dict[ValueType, Callable[[Sequence[Any]], bool]] = {
    ValueType.NUMBER: validate_number_input,
    ValueType.STRING: validate_string_input,
    ValueType.ENUM: validate_number_input,
}


def coerce_value(value: Any) -> Any:
    """Coerce textually numeric telemetry to a number.

    Text that parses fully to a finite number becomes an ``int`` (integral
    literals) or a ``float``; anything else is returned unchanged.
    """
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not _NUMERIC_TEXT.fullmatch(text):
        return value

    if text.lstrip("+-").isdigit():
        try:
            return int(text)
        except ValueError:
            # Past the interpreter's int string conversion limit
            pass

    number = float(text)
    return number if math.isfinite(number) else value


def _format_operand(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Operation:
    """A named, typed comparison predicate plus its UI metadata."""

    key: str
    predicate: Callable[[Sequence[Any]], bool]
    label: str
    applies_to: Tuple[ValueType, ...]
    input_count: int
    description: str
    accepts_missing: bool = False

    def __post_init__(self):
        if not self.applies_to:
            raise ValueError(f"Operation '{self.key}' must apply to at least one value type")
        if self.input_count < 0:
            raise ValueError(f"Operation '{self.key}' has a negative input count")

    @property
    def input_type(self) -> InputType:
        return INPUT_TYPES[self.applies_to[0]]

    def applies(self, value_type: Any) -> bool:
        return value_type in self.applies_to

    def describe(self, values: Optional[Sequence[OperandValue]] = None) -> str:
        """Render the rule header clause, e.g. ``" between 3 and 7"``."""
        values = list(values or [])
        operands = [
            _format_operand(values[index]) if index < len(values) else ""
            for index in range(self.input_count)
        ]
        return self.description.format(*operands)

    def validate(self, inputs: Sequence[Any]) -> bool:
        """Check inputs against the validator of this operation's value types.

        An absent telemetry value is left out of the check for operations
        that accept it. Polymorphic operations accept inputs that are either
        all numbers or all strings.
        """
        if inputs and inputs[0] is None and self.accepts_missing:
            inputs = inputs[1:]

        if len(self.applies_to) > 1:
            return validate_number_input(inputs) or validate_string_input(inputs)

        return INPUT_VALIDATORS[self.applies_to[0]](inputs)


_NUMBER = (ValueType.NUMBER,)
_STRING = (ValueType.STRING,)
_ENUM = (ValueType.ENUM,)
_ANY_TYPE = (ValueType.STRING, ValueType.NUMBER, ValueType.ENUM)

_CATALOG = (
    Operation(
        key="equalTo",
        predicate=lambda inputs: inputs[0] == inputs[1],
        label="is equal to",
        applies_to=_NUMBER,
        input_count=1,
        description=" == {0}",
    ),
    Operation(
        key="notEqualTo",
        predicate=lambda inputs: inputs[0] != inputs[1],
        label="is not equal to",
        applies_to=_NUMBER,
        input_count=1,
        description=" != {0}",
    ),
    Operation(
        key="greaterThan",
        predicate=lambda inputs: inputs[0] > inputs[1],
        label="is greater than",
        applies_to=_NUMBER,
        input_count=1,
        description=" > {0}",
    ),
    Operation(
        key="lessThan",
        predicate=lambda inputs: inputs[0] < inputs[1],
        label="is less than",
        applies_to=_NUMBER,
        input_count=1,
        description=" < {0}",
    ),
    Operation(
        key="greaterThanOrEq",
        predicate=lambda inputs: inputs[0] >= inputs[1],
        label="is greater than or equal to",
        applies_to=_NUMBER,
        input_count=1,
        description=" >= {0}",
    ),
    Operation(
        key="lessThanOrEq",
        predicate=lambda inputs: inputs[0] <= inputs[1],
        label="is less than or equal to",
        applies_to=_NUMBER,
        input_count=1,
        description=" <= {0}",
    ),
    Operation(
        key="between",
        predicate=lambda inputs: inputs[1] < inputs[0] < inputs[2],
        label="is between",
        applies_to=_NUMBER,
        input_count=2,
        description=" between {0} and {1}",
    ),
    # Complement of between, so both bounds count as not between. Deliberately
    # inclusive rather than the strict v < x1 or v > x2 form.
    Operation(
        key="notBetween",
        predicate=lambda inputs: inputs[0] <= inputs[1] or inputs[0] >= inputs[2],
        label="is not between",
        applies_to=_NUMBER,
        input_count=2,
        description=" not between {0} and {1}",
    ),
    Operation(
        key="textContains",
        predicate=lambda inputs: bool(inputs[0] and inputs[1] and inputs[1] in inputs[0]),
        label="text contains",
        applies_to=_STRING,
        input_count=1,
        description=" contains {0}",
    ),
    Operation(
        key="textDoesNotContain",
        predicate=lambda inputs: bool(inputs[0] and inputs[1] and inputs[1] not in inputs[0]),
        label="text does not contain",
        applies_to=_STRING,
        input_count=1,
        description=" does not contain {0}",
    ),
    Operation(
        key="textStartsWith",
        predicate=lambda inputs: inputs[0].startswith(inputs[1]),
        label="text starts with",
        applies_to=_STRING,
        input_count=1,
        description=" starts with {0}",
    ),
    Operation(
        key="textEndsWith",
        predicate=lambda inputs: inputs[0].endswith(inputs[1]),
        label="text ends with",
        applies_to=_STRING,
        input_count=1,
        description=" ends with {0}",
    ),
    Operation(
        key="textIsExactly",
        predicate=lambda inputs: inputs[0] == inputs[1],
        label="text is exactly",
        applies_to=_STRING,
        input_count=1,
        description=" is exactly {0}",
    ),
    Operation(
        key="isUndefined",
        predicate=lambda inputs: inputs[0] is None,
        label="is undefined",
        applies_to=_ANY_TYPE,
        input_count=0,
        description=" is undefined",
        accepts_missing=True,
    ),
    Operation(
        key="isDefined",
        predicate=lambda inputs: inputs[0] is not None,
        label="is defined",
        applies_to=_ANY_TYPE,
        input_count=0,
        description=" is defined",
        accepts_missing=True,
    ),
    Operation(
        key="enumValueIs",
        predicate=lambda inputs: inputs[0] == inputs[1],
        label="is",
        applies_to=_ENUM,
        input_count=1,
        description=" == {0}",
    ),
    Operation(
        key="enumValueIsNot",
        predicate=lambda inputs: inputs[0] != inputs[1],
        label="is not",
        applies_to=_ENUM,
        input_count=1,
        description=" != {0}",
    ),
)

OPERATIONS: Mapping[str, Operation] = MappingProxyType({op.key: op for op in _CATALOG})


class OperationRegistry:
    """Read-only view over the operation catalog used by the evaluator."""

    def __init__(self, operations: Mapping[str, Operation] = OPERATIONS):
        self._operations = MappingProxyType(dict(operations))

    def __contains__(self, key: object) -> bool:
        return key in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def get(self, key: str) -> Optional[Operation]:
        """Get an operation by key."""
        return self._operations.get(key)

    def keys(self) -> List[str]:
        """Get operation keys in catalog order."""
        return list(self._operations)

    def label(self, key: str) -> Optional[str]:
        operation = self.get(key)
        return operation.label if operation else None

    def applies_to(self, key: str, value_type: Any) -> bool:
        operation = self.get(key)
        return operation.applies(value_type) if operation else False

    def input_count(self, key: str) -> Optional[int]:
        operation = self.get(key)
        return operation.input_count if operation else None

    def describe(self, key: str, values: Optional[Sequence[OperandValue]] = None) -> Optional[str]:
        operation = self.get(key)
        return operation.describe(values) if operation else None

    def input_type(self, key: str) -> Optional[InputType]:
        operation = self.get(key)
        return operation.input_type if operation else None

    def keys_for_type(self, value_type: Any) -> List[str]:
        """Get the keys of operations applicable to a value type, in catalog order."""
        return [key for key, operation in self._operations.items() if operation.applies(value_type)]
