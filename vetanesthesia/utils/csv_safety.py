"""Strict number parsing and escaping for CSV, HTML and file names."""

from __future__ import annotations

import math
import re

# Full-string grammar: optional minus, digits with at most one point, optional exponent.
_NUMBER_RE = re.compile(r"-?(\d+\.?\d*|\d*\.?\d+)([eE][+-]?\d+)?", re.ASCII)
_SIGNED_DECIMAL_RE = re.compile(r"-?\d+(\.\d+)?", re.ASCII)
_FORMULA_PREFIXES = ("=", "+", "@")
_CSV_QUOTE_TRIGGERS = (",", '"', "\n", "\r")
_UNSAFE_FILENAME_RE = re.compile(r'[/\\:*?"<>|]')

UNNAMED_FILE = "unnamed"


def parse_number(s: str) -> float | None:
    """Parse user-typed text into a finite float.

    Returns None for blank text, anything that is not entirely a decimal
    literal ("12abc", "1.2.3", "Infinity", "NaN") and values that overflow
    to infinity ("1e309"). "-0" parses to -0.0.
    """
    if not isinstance(s, str):
        return None
    s = s.strip()
    if not s:
        return None
    if not _NUMBER_RE.fullmatch(s):
        return None
    val = float(s)
    if not math.isfinite(val):
        return None
    return val


def format_number(value: int | float) -> str:
    """Render a number the way the record files always have: 80.0 -> "80"."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _quote(s: str) -> str:
    return '"' + s.replace('"', '""') + '"'


def is_formula_risk(s: str) -> bool:
    """True if a spreadsheet would evaluate *s* as a formula.

    A leading minus is only a risk when the cell is not a plain signed
    decimal, so "-5" and "-37.5" stay as they are while "-1+1" does not.
    """
    if s.startswith(_FORMULA_PREFIXES):
        return True
    return s.startswith("-") and not _SIGNED_DECIMAL_RE.fullmatch(s)


def neutralize_formula(s: str) -> str:
    """Quote a risky cell and put an apostrophe inside the opening quote."""
    return _quote("'" + s)


def quote_csv_field(s: str) -> str:
    """Standard CSV quoting for values holding a delimiter, quote or newline."""
    if any(ch in s for ch in _CSV_QUOTE_TRIGGERS):
        return _quote(s)
    return s


def escape_csv(value: str | int | float | None) -> str:
    """Escape one CSV cell.

    Numbers are written as-is and never treated as formulas. Strings pass
    the formula check first; if it fires, the result is already quoted and
    final. Otherwise standard quoting applies.
    """
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    s = value if isinstance(value, str) else str(value)
    if isinstance(value, str) and is_formula_risk(s):
        return neutralize_formula(s)
    return quote_csv_field(s)


def escape_html(s: str | None) -> str:
    """Escape text for HTML element content and attribute values."""
    if s is None:
        return ""
    s = str(s)
    # & must go first or the entities below would be escaped again
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def sanitize_file_name(name: str | None) -> str:
    """Replace path separators and reserved characters with underscores."""
    if not name:
        return UNNAMED_FILE
    return _UNSAFE_FILENAME_RE.sub("_", str(name))
