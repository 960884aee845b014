"""
Constants Package

Fraction tables and input limits shared by the services.
"""

from .units import UNICODE_FRACTIONS, INGREDIENT_FIELD_SEPARATOR, INGREDIENT_FIELD_COUNT
from .validation import MAX_LENGTHS, DANGEROUS_SCHEMES, HOST_REQUIRED_SCHEMES

__all__ = [
    'UNICODE_FRACTIONS',
    'INGREDIENT_FIELD_SEPARATOR',
    'INGREDIENT_FIELD_COUNT',
    'MAX_LENGTHS',
    'DANGEROUS_SCHEMES',
    'HOST_REQUIRED_SCHEMES',
]
