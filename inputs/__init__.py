"""
Input preparation — loading raw parameter files, normalization, validation.
"""

from .loader import load_parameter_file
from .validators import ValidationResult, normalize_parameters

__all__ = [
    "load_parameter_file",
    "ValidationResult",
    "normalize_parameters",
]
