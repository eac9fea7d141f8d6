import math
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable


class TypeTag(Enum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    EMPTY = "empty"

    @property
    def numeric(self) -> bool:
        return self in (TypeTag.INTEGER, TypeTag.FLOAT)


class DateOrder(Enum):
    """Tie-break for slash/dash dates where day and month are both <= 12."""

    MDY = "mdy"
    DMY = "dmy"


BOOLEAN_TOKENS = frozenset({"true", "false", "yes", "no", "y", "n"})

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER_RE = re.compile(r"-?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# (shape, strptime format); the shape keeps strptime from accepting "1/2/2024"
_ISO_DATE = (re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}"), "%Y-%m-%d")
_MDY_DATES = (
    (re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}"), "%m/%d/%Y"),
    (re.compile(r"[0-9]{2}-[0-9]{2}-[0-9]{4}"), "%m-%d-%Y"),
)
_DMY_DATES = (
    (re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}"), "%d/%m/%Y"),
    (re.compile(r"[0-9]{2}-[0-9]{2}-[0-9]{4}"), "%d-%m-%Y"),
)


def date_formats(order: DateOrder = DateOrder.MDY):
    """Accepted date shapes, in the order they are tried."""
    first, second = (_MDY_DATES, _DMY_DATES) if order is DateOrder.MDY else (_DMY_DATES, _MDY_DATES)
    return (_ISO_DATE, first[0], second[0], first[1], second[1])


def _is_empty(text: str) -> bool:
    return text == ""


def _is_boolean(text: str) -> bool:
    return text.lower() in BOOLEAN_TOKENS


def _is_integer(text: str) -> bool:
    if not _INTEGER_RE.fullmatch(text):
        return False
    return INT64_MIN <= int(text) <= INT64_MAX


def _is_float(text: str) -> bool:
    # integer-shaped values that overflowed int64 stay Text
    if _INTEGER_RE.fullmatch(text) or not _FLOAT_RE.fullmatch(text):
        return False
    try:
        value = float(text)
    except ValueError:
        return False
    return math.isfinite(value)


def _date_rule(order: DateOrder) -> Callable[[str], bool]:
    formats = date_formats(order)

    def _is_date(text: str) -> bool:
        for shape, fmt in formats:
            if not shape.fullmatch(text):
                continue
            try:
                datetime.strptime(text, fmt)
            except ValueError:
                continue
            return True
        return False

    return _is_date


def build_rules(order: DateOrder = DateOrder.MDY):
    """Ordered (tag, predicate) table; first match wins, Text is the fallback."""
    return (
        (TypeTag.EMPTY, _is_empty),
        (TypeTag.BOOLEAN, _is_boolean),
        (TypeTag.INTEGER, _is_integer),
        (TypeTag.FLOAT, _is_float),
        (TypeTag.DATE, _date_rule(order)),
    )


RULES = {order: build_rules(order) for order in DateOrder}


def classify(raw: str, date_order: DateOrder = DateOrder.MDY) -> TypeTag:
    """Classify one raw field. Total: anything unrecognised is Text."""
    text = "" if raw is None else str(raw).strip()
    for tag, matches in RULES[date_order]:
        if matches(text):
            return tag
    return TypeTag.TEXT


@dataclass(frozen=True)
class Cell:
    raw: str
    type: TypeTag

    @classmethod
    def of(cls, raw: str, date_order: DateOrder = DateOrder.MDY) -> "Cell":
        raw = "" if raw is None else str(raw)
        return cls(raw, classify(raw, date_order))


def classify_row(fields: Iterable[str], date_order: DateOrder = DateOrder.MDY) -> tuple[Cell, ...]:
    return tuple(Cell.of(f, date_order) for f in fields)
