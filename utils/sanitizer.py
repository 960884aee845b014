"""
Input Sanitization Module

Normalizes user-supplied text before it is stored. Text is kept verbatim
apart from surrounding whitespace and control characters, so an exact-title
lookup finds what was stored.
"""

import re

# Control characters except tab/newline/carriage return
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
_ALL_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


class TextTooLongError(ValueError):
    """Raised when cleaned text exceeds its field limit."""

    def __init__(self, field, max_length):
        super().__init__(f"{field} must be at most {max_length} characters")
        self.field = field
        self.max_length = max_length


def _check_length(text, field, max_length):
    if max_length is not None and len(text) > max_length:
        raise TextTooLongError(field, max_length)
    return text


def sanitize_line(text, field='text', max_length=200):
    """
    Clean a single-line value such as a title, owner, name or unit.

    Strips whitespace, removes all control characters and collapses runs of
    spaces.

    Args:
        text: The text to clean (can be None)
        field: Field name used in the error message
        max_length: Maximum allowed length after cleaning

    Returns:
        Cleaned string ('' for None)

    Raises:
        TextTooLongError: If the cleaned text is longer than max_length
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = _ALL_CONTROL_CHARS.sub(' ', text)
    text = re.sub(r'\s+', ' ', text).strip()

    return _check_length(text, field, max_length)


def sanitize_multiline(text, field='text', max_length=50000):
    """
    Clean free text such as a description.

    Preserves newlines and tabs for formatting.
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = _CONTROL_CHARS.sub('', text).strip()

    return _check_length(text, field, max_length)
