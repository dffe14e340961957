"""Password composition rules."""
from __future__ import annotations

from dataclasses import dataclass

from agora.core.settings import settings

__all__ = ["PolicyViolation", "validate_password"]


@dataclass(frozen=True)
class PolicyViolation:
    """A single broken password rule."""

    rule: str
    message: str


def validate_password(
    candidate: str,
    *,
    min_length: int | None = None,
    max_length: int | None = None,
) -> list[PolicyViolation]:
    """Return the rules ``candidate`` breaks, in a fixed order.

    Args:
        candidate: Password to check.
        min_length: Minimum length; defaults to ``PASSWORD_MIN_LENGTH``.
        max_length: Maximum length; defaults to ``PASSWORD_MAX_LENGTH``.

    Returns:
        An empty list when the password is acceptable.
    """
    lower_bound = settings.password_min_length if min_length is None else min_length
    upper_bound = settings.password_max_length if max_length is None else max_length

    violations: list[PolicyViolation] = []
    if len(candidate) < lower_bound:
        violations.append(
            PolicyViolation("min", f"Password must be at least {lower_bound} characters long.")
        )
    if len(candidate) > upper_bound:
        violations.append(
            PolicyViolation("max", f"Password must be at most {upper_bound} characters long.")
        )
    if not any(char.isupper() for char in candidate):
        violations.append(
            PolicyViolation("uppercase", "Password must contain at least one uppercase letter.")
        )
    if not any(char.islower() for char in candidate):
        violations.append(
            PolicyViolation("lowercase", "Password must contain at least one lowercase letter.")
        )
    if not any(char.isdigit() for char in candidate):
        violations.append(
            PolicyViolation("digits", "Password must contain at least one digit.")
        )
    if any(char.isspace() for char in candidate):
        violations.append(
            PolicyViolation("spaces", "Password must not contain spaces.")
        )
    return violations
