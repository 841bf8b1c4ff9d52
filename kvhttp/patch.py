"""Patch engine: operator patches and flat merges over stored objects.

An operator patch is a mapping whose keys are either operator names
(``$set``, ``$add``, ``$sub``) or plain field names::

    {"$add": {"count": 3}, "$sub": {"name": 2}, "status": "active"}

Each operator carries exactly one ``{field: operand}`` entry. Operators
are applied first, in patch order; plain fields are written afterwards
and may overwrite an operator's result on the same field.

Everything in this module is pure: no I/O, and input documents are
never mutated.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .codec import encode
from .errors import InvalidArgument, InvalidValue


class Missing(enum.Enum):
    """Marker for a field (or key) that has no value at all."""

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


MISSING = Missing.MISSING


# -- Instructions --


@dataclass(frozen=True)
class SetField:
    """``$set``: overwrite the field unconditionally."""

    field: str
    operand: Any


@dataclass(frozen=True)
class AddTo:
    """``$add``: append to a string or list, or add to a number."""

    field: str
    operand: Any


@dataclass(frozen=True)
class SubFrom:
    """``$sub``: truncate a string or list, or subtract from a number."""

    field: str
    operand: Any


Instruction = Union[SetField, AddTo, SubFrom]

OPERATORS: dict[str, type[SetField] | type[AddTo] | type[SubFrom]] = {
    "$set": SetField,
    "$add": AddTo,
    "$sub": SubFrom,
}


# -- Input variants --


@dataclass(frozen=True)
class Scalar:
    """A whole replacement value; written with a plain ``set``."""

    value: Any


@dataclass(frozen=True)
class Fields:
    """A mapping of fields to merge into the stored object."""

    fields: Mapping[str, Any]


Patch = Union[Scalar, Fields]


def classify(value: Any) -> Patch:
    """Wrap a caller-supplied update argument in its input variant.

    Mappings become ``Fields``; anything else (lists and ``None``
    included) becomes ``Scalar``. Already-wrapped values pass through.
    """
    if isinstance(value, (Scalar, Fields)):
        return value
    if isinstance(value, Mapping):
        return Fields(value)
    return Scalar(value)


# -- Applying instructions --


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_text(operand: Any) -> str:
    if isinstance(operand, str):
        return operand
    return encode(operand)


def _as_count(instruction: Instruction) -> int:
    operand = instruction.operand
    if isinstance(operand, float) and operand.is_integer():
        operand = int(operand)
    if not isinstance(operand, int) or isinstance(operand, bool):
        raise InvalidArgument(
            f"Cannot truncate {instruction.field!r} by {operand!r}: "
            f"expected an integer count"
        )
    return abs(operand)


def _as_number(instruction: Instruction) -> int | float:
    if not _is_number(instruction.operand):
        raise InvalidArgument(
            f"Cannot apply {instruction.operand!r} to numeric field "
            f"{instruction.field!r}: operand is not a number"
        )
    return instruction.operand


def _add(current: Any, instruction: AddTo) -> Any:
    if isinstance(current, str):
        return current + _as_text(instruction.operand)
    if _is_number(current):
        return current + _as_number(instruction)
    if isinstance(current, list):
        return [*current, instruction.operand]
    return current


def _sub(current: Any, instruction: SubFrom) -> Any:
    if isinstance(current, str):
        keep = max(len(current) - _as_count(instruction), 0)
        return current[:keep]
    if _is_number(current):
        return current - _as_number(instruction)
    if isinstance(current, list):
        keep = max(len(current) - _as_count(instruction), 0)
        return current[:keep]
    return current


def apply_instruction(current: Any, instruction: Instruction) -> Any:
    """Return the field's new value after one instruction.

    ``current`` is the field's present value, or ``MISSING``. The
    dispatch is on its runtime type: ``str``, number (``bool`` is not
    a number), ``list``, or anything else. Unsupported types come back
    unchanged, so ``$add``/``$sub`` on a missing field return
    ``MISSING``.

    Raises:
        InvalidArgument: If the operand does not suit the field's type.
    """
    if isinstance(instruction, SetField):
        return instruction.operand
    if isinstance(instruction, AddTo):
        return _add(current, instruction)
    if isinstance(instruction, SubFrom):
        return _sub(current, instruction)
    raise TypeError(f"Unknown instruction: {instruction!r}")


# -- Parsed patches --


@dataclass
class OperatorPatch:
    """A parsed operator patch, ready to apply to a document."""

    instructions: list[Instruction] = field(default_factory=list)
    plain: dict[str, Any] = field(default_factory=dict)

    def apply(self, document: Mapping[str, Any]) -> dict[str, Any]:
        """Apply to a shallow copy of ``document`` and return the copy."""
        result = dict(document)
        for instruction in self.instructions:
            current = result.get(instruction.field, MISSING)
            value = apply_instruction(current, instruction)
            if value is not MISSING:
                result[instruction.field] = value
        result.update(self.plain)
        return result


def parse_patch(patch: Mapping[str, Any]) -> OperatorPatch:
    """Split a patch mapping into operator instructions and plain fields.

    Raises:
        InvalidArgument: If an operator payload is not a mapping with
            exactly one string-keyed entry.
    """
    parsed = OperatorPatch()
    for name, payload in patch.items():
        kind = OPERATORS.get(name)
        if kind is None:
            parsed.plain[name] = payload
            continue
        if not isinstance(payload, Mapping) or len(payload) != 1:
            raise InvalidArgument(
                f"{name} expects a single {{field: operand}} mapping, "
                f"got {payload!r}"
            )
        ((target, operand),) = payload.items()
        if not isinstance(target, str):
            raise InvalidArgument(
                f"{name} field name must be a str, not {type(target).__name__}"
            )
        parsed.instructions.append(kind(target, operand))
    return parsed


def apply_patch(
    document: Mapping[str, Any], patch: Mapping[str, Any]
) -> dict[str, Any]:
    """Parse and apply an operator patch in one step."""
    return parse_patch(patch).apply(document)


def merge_fields(
    document: Mapping[str, Any], fields: Mapping[str, Any]
) -> dict[str, Any]:
    """Flat merge: every entry in ``fields`` overwrites ``document``."""
    return {**document, **fields}


def as_document(key: str, value: Any) -> dict[str, Any]:
    """The object a field patch is applied to.

    A missing key patches an empty object. A stored value that is
    not an object cannot take field patches.

    Raises:
        InvalidValue: If ``value`` is present but not a mapping.
    """
    if value is MISSING:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidValue(key, value)
    return dict(value)
