"""Source validation module."""

from catalogstats.validation.core import SourceValidator, ValidationResult
from catalogstats.validation.reporter import ConsoleReporter

__all__ = ["ConsoleReporter", "SourceValidator", "ValidationResult"]
