"""Validators module - query outcome validation."""

from .outcome import OutcomeValidator, is_falsy

__all__ = [
    "OutcomeValidator",
    "is_falsy",
]
