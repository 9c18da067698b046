"""
Data Quality Module
"""
from .validators import TableValidator, ValidationResult, ValidationSeverity, validate_snapshot

__all__ = [
    "TableValidator",
    "ValidationResult",
    "ValidationSeverity",
    "validate_snapshot",
]
