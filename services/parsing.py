"""
Parsing Service

Functions for reading ingredient quantities and the newline-delimited
"quantity,unit,name" ingredient list format.
"""

import math
import re

from constants import UNICODE_FRACTIONS, INGREDIENT_FIELD_SEPARATOR, INGREDIENT_FIELD_COUNT


class IngredientParseError(ValueError):
    """Raised when an ingredient line or quantity cannot be read."""

    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


def normalize_fractions(text):
    """Replace Unicode fraction characters with decimal equivalents."""
    # First, normalize all whitespace (including non-breaking spaces) to regular spaces
    text = re.sub(r'[\s\u00a0\u2000-\u200b]+', ' ', text)

    for char, value in UNICODE_FRACTIONS.items():
        if char in text:
            # Check if preceded by a number (mixed fraction like "1½" or "1 ½")
            pattern = r'(\d+)\s*' + re.escape(char)
            match = re.search(pattern, text)
            if match:
                whole = float(match.group(1))
                replacement = str(whole + value)
                text = re.sub(pattern, replacement, text)
            else:
                text = text.replace(char, str(value))
    return text


def parse_quantity(value):
    """
    Strictly convert a quantity string to a non-negative float.

    Handles: 1, 1.5, .5, 1/2, 1 1/2, ½, 1½

    Raises:
        IngredientParseError: If the value is not a finite non-negative number
    """
    s = normalize_fractions(str(value)).strip()
    if not s:
        raise IngredientParseError("Missing quantity")

    # Check for mixed fraction like "1 1/2"
    mixed_match = re.match(r'^(\d+)\s+(\d+)\s*/\s*(\d+)$', s)
    # Check for simple fraction like "1/2"
    frac_match = re.match(r'^(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)$', s)

    if mixed_match:
        whole, num, denom = (float(g) for g in mixed_match.groups())
        if denom == 0:
            raise IngredientParseError(f"Invalid quantity: {value!r}")
        quantity = whole + (num / denom)
    elif frac_match:
        num, denom = (float(g) for g in frac_match.groups())
        if denom == 0:
            raise IngredientParseError(f"Invalid quantity: {value!r}")
        quantity = num / denom
    else:
        try:
            quantity = float(s)
        except ValueError:
            raise IngredientParseError(f"Quantity is not a number: {value!r}") from None

    if not math.isfinite(quantity) or quantity < 0:
        raise IngredientParseError(f"Quantity must be a non-negative number: {value!r}")
    return quantity


def parse_ingredient_line(line, line_number=None):
    """
    Parse one "quantity,unit,name" line into (quantity, unit, name).

    The unit may be empty ("2,,eggs"); the name may not. The name is
    returned lowercase.
    """
    fields = line.split(INGREDIENT_FIELD_SEPARATOR)
    if len(fields) != INGREDIENT_FIELD_COUNT:
        raise IngredientParseError(
            f"Expected {INGREDIENT_FIELD_COUNT} comma-separated fields "
            f"(quantity,unit,name), got {len(fields)}",
            line_number,
        )

    qty_str, unit, name = (f.strip() for f in fields)
    try:
        quantity = parse_quantity(qty_str)
    except IngredientParseError as e:
        raise IngredientParseError(str(e), line_number) from None

    name = re.sub(r'\s+', ' ', name).lower()
    if not name:
        raise IngredientParseError("Ingredient name is empty", line_number)

    return quantity, unit, name


def parse_ingredients_text(text):
    """
    Parse a newline-delimited ingredient list.

    Blank lines are skipped. Any malformed line fails the whole parse, so
    callers never see a partial result.

    Returns:
        List of (quantity, unit, name) tuples, in input order
    """
    if text is None:
        raise IngredientParseError("No ingredients given")

    parsed = []
    for line_number, raw in enumerate(str(text).splitlines(), start=1):
        if not raw.strip():
            continue
        parsed.append(parse_ingredient_line(raw, line_number))

    if not parsed:
        raise IngredientParseError("No ingredients given")
    return parsed
