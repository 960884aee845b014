# Utility modules for the recipe store
from .url_validator import check_link, is_valid_link, validate_link, LinkValidationError
from .sanitizer import (
    sanitize_line, sanitize_multiline, TextTooLongError
)
