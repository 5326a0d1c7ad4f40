from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Optional, Sequence

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


def require_non_negative(value: Any, message: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if not math.isfinite(number) or number < 0:
        raise ValidationError(message)
    return number


def require_choice(value: Any, choices: Iterable[Any], message: str):
    allowed = list(choices)
    if value not in allowed:
        raise ValidationError(message)
    return value


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


Rule = Callable[[], Optional[str]]


def collect_issues(rules: Sequence[Rule]) -> list[str]:
    """Evaluate rules in order and return every violation message."""
    issues: list[str] = []
    for rule in rules:
        message = rule()
        if message:
            issues.append(message)
    return issues


def raise_first(issues: Sequence[str]) -> None:
    if issues:
        raise ValidationError(issues[0], issues)
