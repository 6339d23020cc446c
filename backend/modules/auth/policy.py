"""Heuristic password strength scoring."""

import re

from .models import PasswordStrength

MAX_SCORE = 5
MAX_SUGGESTIONS = 3
WEAK_PATTERN_PENALTY = 2
MIN_LENGTH = 8

WEAK_PATTERNS = ("123456", "password", "qwerty", "abc123", "admin")

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def evaluate_password_strength(password: str) -> PasswordStrength:
    """
    Score a password from 0 to 5.

    One point each for length, uppercase, lowercase, digit and symbol.
    Containing a weak pattern costs two points and makes the password
    invalid regardless of its score. Suggestions follow the order of the
    checks and are capped at three.
    """
    score = 0
    suggestions: list[str] = []

    if len(password) >= MIN_LENGTH:
        score += 1
    else:
        suggestions.append(f"Use at least {MIN_LENGTH} characters")

    if _UPPER.search(password):
        score += 1
    else:
        suggestions.append("Include uppercase letters")

    if _LOWER.search(password):
        score += 1
    else:
        suggestions.append("Include lowercase letters")

    if _DIGIT.search(password):
        score += 1
    else:
        suggestions.append("Include numbers")

    if _SYMBOL.search(password):
        score += 1
        suggestions.append("Great! You're using special characters")
    else:
        suggestions.append("Consider adding special characters")

    lowered = password.lower()
    has_weak_pattern = any(pattern in lowered for pattern in WEAK_PATTERNS)
    if has_weak_pattern:
        score -= WEAK_PATTERN_PENALTY
        suggestions.append("Avoid common patterns like '123456' or 'password'")

    return PasswordStrength(
        is_valid=score >= 3 and not has_weak_pattern,
        score=max(0, min(MAX_SCORE, score)),
        suggestions=suggestions[:MAX_SUGGESTIONS],
    )
