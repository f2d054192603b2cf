"""Validation package."""

from finance_tracker.validation.validator import CommandValidator

__all__ = ["CommandValidator"]
