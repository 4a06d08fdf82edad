"""Six-field cron expression validation: ``second minute hour day month weekday``."""

import re
from dataclasses import dataclass

# (name, min, max)
FIELDS = (
    ("second", 0, 59),
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day", 1, 31),
    ("month", 1, 12),
    ("weekday", 0, 7),  # 0 and 7 are both Sunday
)

_NUMBER = re.compile(r"^\d+$")


@dataclass
class CronValidation:
    valid: bool
    error: str | None = None


def _check_value(raw: str, name: str, low: int, high: int) -> None:
    if not _NUMBER.match(raw):
        raise ValueError(f"{name}: '{raw}' is not a number")
    value = int(raw)
    if not low <= value <= high:
        raise ValueError(f"{name}: {value} is out of range {low}-{high}")


def _check_part(part: str, name: str, low: int, high: int) -> None:
    if not part:
        raise ValueError(f"{name}: empty list item")

    base, _, step = part.partition("/")
    if step or part.endswith("/"):
        if not _NUMBER.match(step) or int(step) == 0:
            raise ValueError(f"{name}: invalid step '{step}'")

    if base == "*":
        return
    if "-" in base:
        start, _, end = base.partition("-")
        _check_value(start, name, low, high)
        _check_value(end, name, low, high)
        if int(start) > int(end):
            raise ValueError(f"{name}: range {base} is reversed")
        return
    _check_value(base, name, low, high)


def validate_cron_expression(expr: str) -> CronValidation:
    """Check a six-field cron expression against field-specific bounds."""
    if not isinstance(expr, str):
        return CronValidation(False, "cron expression must be a string")
    fields = expr.split()
    if len(fields) != len(FIELDS):
        return CronValidation(False, f"expected {len(FIELDS)} fields, got {len(fields)}")
    try:
        for raw, (name, low, high) in zip(fields, FIELDS):
            for part in raw.split(","):
                _check_part(part, name, low, high)
    except ValueError as e:
        return CronValidation(False, str(e))
    return CronValidation(True)


def to_croniter_expr(expr: str) -> str:
    """Move the leading seconds field to the end, where croniter expects it."""
    second, *rest = expr.split()
    return " ".join([*rest, second])
