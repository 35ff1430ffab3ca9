"""
Measurement grammar shared by every recipe parser.

Pulls a leading quantity, a unit and a trailing preparation phrase off an
ingredient line, and reads durations and oven temperatures out of free text.
Every function here is pure and total: bad input gives None, never an
exception.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from ..core.text import split_top_level

# --- Data Tables ---

VULGAR_FRACTIONS = {
    "½": "1/2", "⅓": "1/3", "⅔": "2/3", "¼": "1/4", "¾": "3/4",
    "⅕": "1/5", "⅖": "2/5", "⅗": "3/5", "⅘": "4/5", "⅙": "1/6",
    "⅚": "5/6", "⅛": "1/8", "⅜": "3/8", "⅝": "5/8", "⅞": "7/8",
}

# canonical -> aliases
_UNITS = {
    "cup": ("c", "cup", "cups"),
    "tsp": ("t", "tsp", "tsps", "teaspoon", "teaspoons"),
    "tbsp": ("tbsp", "tbsps", "tbs", "tbl", "tablespoon", "tablespoons"),
    "oz": ("oz", "ounce", "ounces"),
    "lb": ("lb", "lbs", "pound", "pounds"),
    "g": ("g", "gr", "gram", "grams"),
    "kg": ("kg", "kgs", "kilogram", "kilograms"),
    "mg": ("mg", "milligram", "milligrams"),
    "ml": ("ml", "milliliter", "milliliters", "millilitre", "millilitres"),
    "l": ("l", "liter", "liters", "litre", "litres"),
    "pint": ("pt", "pint", "pints"),
    "quart": ("qt", "quart", "quarts"),
    "gallon": ("gal", "gallon", "gallons"),
    "pinch": ("pinch", "pinches"),
    "dash": ("dash", "dashes"),
    "clove": ("clove", "cloves"),
    "slice": ("slice", "slices"),
    "piece": ("piece", "pieces"),
    "can": ("can", "cans"),
    "package": ("pkg", "package", "packages"),
    "stick": ("stick", "sticks"),
    "bunch": ("bunch", "bunches"),
    "whole": ("whole",),
}

UNIT_ALIASES: Dict[str, str] = {
    alias: canonical for canonical, aliases in _UNITS.items() for alias in (canonical, *aliases)
}

PREPARATION_WORDS = (
    "diced", "minced", "chopped", "sliced", "crushed", "grated",
    "shredded", "julienned", "melted", "softened", "beaten",
    "whisked", "sifted", "toasted", "roasted", "blanched",
    "peeled", "seeded", "cored", "trimmed", "halved", "quartered",
    "cubed", "crumbled", "thawed", "frozen", "fresh", "dried",
    "cooked", "uncooked", "raw",
)

# --- Patterns ---

# "2", "2.5", "1/2", "2 1/2", "2-3", "1/2 to 1"
_NUMBER = r"\d+(?:\s+\d+/\d+|\.\d+|/\d+)?"
QUANTITY_RE = re.compile(rf"^({_NUMBER}(?:\s*(?:-|–|—|to(?=\s*\d))\s*{_NUMBER})?)\s*")
RANGE_SPLIT_RE = re.compile(r"\s*(?:-|–|—|\bto\b)\s*")
MIXED_RE = re.compile(r"(\d+)\s+(\d+)/(\d+)")
FRACTION_RE = re.compile(r"(\d+)/(\d+)")
UNIT_RE = re.compile(r"^([a-zA-Z]+\.?)(?=\s|$)")
LEADING_NOTE_RE = re.compile(r"^\(([^()]*)\)\s*(.*)$", re.DOTALL)
TRAILING_PAREN_RE = re.compile(r"^(.+?)\s*\(([^()]+)\)\s*$", re.DOTALL)
PREP_SUFFIX_RE = re.compile(
    rf"^(?P<name>.+?)\s+(?P<prep>(?:\w+ly\s+)?(?:{'|'.join(PREPARATION_WORDS)}))\s*$",
    re.IGNORECASE | re.DOTALL,
)

ISO_DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+(?:\.\d+)?)H)?(?:(\d+(?:\.\d+)?)M)?(?:(\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)
HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)(?![a-z])", re.IGNORECASE)
MINUTES_RE = re.compile(r"(\d+)\s*(?:minutes?|mins?|m)(?![a-z])", re.IGNORECASE)

TEMPERATURE_RE = re.compile(r"(\d+)\s*(°|º|degrees?)?\s*([FC])\b", re.IGNORECASE)
DEGREES_ONLY_RE = re.compile(r"(\d+)\s*(?:°|º|degrees?)(?!\s*[FC]\b)", re.IGNORECASE)
FAHRENHEIT_RANGE = (100, 600)
# Without a degree sign "2 c" is a cup, not a temperature
_PLAUSIBLE_BARE = {"F": FAHRENHEIT_RANGE, "C": (30, 300)}

_FIRST_INT_RE = re.compile(r"\d+")


def normalize_fractions(text: str) -> str:
    """'1½' -> '1 1/2', '¾' -> '3/4'."""
    if not text:
        return ""
    text = text.replace("⁄", "/")
    for glyph, ascii_frac in VULGAR_FRACTIONS.items():
        if glyph in text:
            text = re.sub(
                rf"(?:(\d)\s*)?{glyph}",
                lambda m, frac=ascii_frac: (f"{m.group(1)} " if m.group(1) else "") + frac,
                text,
            )
    return text


def _parse_single(text: str) -> Optional[Decimal]:
    m = MIXED_RE.fullmatch(text)
    if m:
        whole, numerator, denominator = (int(g) for g in m.groups())
        if denominator == 0:
            return None
        return Decimal(whole) + Decimal(numerator) / Decimal(denominator)

    m = FRACTION_RE.fullmatch(text)
    if m:
        numerator, denominator = (int(g) for g in m.groups())
        if denominator == 0:
            return None
        return Decimal(numerator) / Decimal(denominator)

    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    return value if value.is_finite() else None


def parse_quantity(text: Optional[str]) -> Optional[Decimal]:
    """
    Quantity string -> Decimal.

    Handles integers, decimals, fractions, mixed numbers and ranges (a range
    is the mean of its endpoints). Returns None for anything else.
    """
    if text is None:
        return None
    s = normalize_fractions(str(text)).strip()
    if not s:
        return None

    parts = RANGE_SPLIT_RE.split(s)
    if len(parts) == 2:
        low, high = _parse_single(parts[0].strip()), _parse_single(parts[1].strip())
        if low is None or high is None:
            return None
        return (low + high) / 2
    if len(parts) > 2:
        return None

    return _parse_single(s)


def _unit_key(unit: str) -> str:
    return unit.strip().lower().rstrip(".")


def normalize_unit(unit: str) -> str:
    """Map a unit alias to its canonical spelling; unknown units pass through lower-cased."""
    key = _unit_key(unit or "")
    return UNIT_ALIASES.get(key, key)


def is_known_unit(token: str) -> bool:
    return _unit_key(token or "") in UNIT_ALIASES


def split_unit(text: str) -> Tuple[Optional[str], str]:
    """Take a leading unit word off `text` if it is one we know."""
    text = (text or "").strip()
    m = UNIT_RE.match(text)
    if m and is_known_unit(m.group(1)):
        return normalize_unit(m.group(1)), text[m.end():].strip()
    return None, text


def extract_leading_note(text: str) -> Tuple[Optional[str], str]:
    """'(14 oz) can tomatoes' -> ('14 oz', 'can tomatoes')."""
    m = LEADING_NOTE_RE.match((text or "").strip())
    if not m:
        return None, (text or "").strip()
    return (m.group(1).strip() or None), m.group(2).strip()


def parse_quantity_and_unit(text: str) -> Tuple[Optional[Decimal], Optional[str], str]:
    """
    Parse quantity and unit from ingredient text.
    Examples: "2 cups flour", "1/2 tsp salt", "3-4 cloves garlic"

    Returns (quantity, unit, remaining). Without a parseable leading quantity
    the whole text comes back as `remaining`.
    """
    text = normalize_fractions((text or "").strip())

    m = QUANTITY_RE.match(text)
    if not m:
        return None, None, text

    quantity = parse_quantity(m.group(1))
    if quantity is None:
        return None, None, text

    unit, remaining = split_unit(text[m.end():])
    return quantity, unit, remaining


def extract_preparation(text: str) -> Tuple[str, Optional[str]]:
    """
    Split a preparation phrase off an ingredient name.
    Examples: "onion, diced", "butter (softened)", "garlic finely minced"
    """
    text = (text or "").strip()

    # 1. Text after the first top-level comma
    parts = split_top_level(text, ",")
    if len(parts) > 1:
        name = parts[0].strip()
        preparation = ",".join(parts[1:]).strip()
        if name:
            return name, preparation or None

    # 2. Trailing parenthetical
    m = TRAILING_PAREN_RE.match(text)
    if m:
        return m.group(1).strip(), m.group(2).strip()

    # 3. Known preparation word at the end
    m = PREP_SUFFIX_RE.match(text)
    if m:
        return m.group("name").strip(), m.group("prep").strip()

    return text, None


def parse_iso8601_duration(value: str) -> Optional[int]:
    """'PT1H30M' -> 90. Returns None if `value` is not an ISO-8601 duration."""
    m = ISO_DURATION_RE.match((value or "").strip())
    if not m or not any(m.groups()):
        return None
    days, hours, minutes, seconds = (Decimal(g) if g else Decimal(0) for g in m.groups())
    total = days * 1440 + hours * 60 + minutes + (1 if seconds >= 30 else 0)
    return int(total)


def parse_time(text: Optional[str]) -> Optional[int]:
    """
    Parse a duration in minutes.
    Examples: "30 minutes", "1 hour", "2 hrs 30 min", "PT45M", "25"
    """
    if text is None:
        return None
    s = str(text).strip()
    if not s:
        return None

    iso = parse_iso8601_duration(s)
    if iso is not None:
        return iso or None

    total = 0
    hours = HOURS_RE.search(s)
    if hours:
        total += int(Decimal(hours.group(1)) * 60)
    minutes = MINUTES_RE.search(s)
    if minutes:
        total += int(minutes.group(1))

    # If only a number without unit, assume minutes
    if total == 0 and s.isdigit():
        total = int(s)

    return total or None


def parse_temperature(text: Optional[str]) -> Tuple[Optional[int], Optional[str]]:
    """
    Parse an oven temperature.
    Examples: "350F", "180 C", "350°F", "350 degrees F", "350"
    """
    if text is None:
        return None, None
    s = str(text).strip()
    if not s:
        return None, None

    for m in TEMPERATURE_RE.finditer(s):
        value, marker, unit = int(m.group(1)), m.group(2), m.group(3).upper()
        low, high = _PLAUSIBLE_BARE[unit]
        if marker or low <= value <= high:
            return value, unit

    low, high = FAHRENHEIT_RANGE
    m = DEGREES_ONLY_RE.search(s)
    if m and low <= int(m.group(1)) <= high:
        return int(m.group(1)), "F"

    # If just a number, assume F (more common in recipes)
    if s.isdigit() and low <= int(s) <= high:
        return int(s), "F"

    return None, None


def parse_servings(value: Any) -> Optional[int]:
    """First integer in a yield value: 4, "4", "Serves 4-6", ["4 servings"]."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) and value > 0 else None
    if isinstance(value, (list, tuple)):
        for item in value:
            servings = parse_servings(item)
            if servings is not None:
                return servings
        return None
    m = _FIRST_INT_RE.search(str(value))
    return int(m.group()) if m else None


def is_optional_ingredient(text: str) -> bool:
    lower = (text or "").lower()
    return "optional" in lower or "if desired" in lower
