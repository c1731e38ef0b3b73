"""
Shared utilities for PyBycatch I/O modules.

Functions
---------
- safe_float(): Safely convert values to float
- normalize_code(): Canonical string form of region/category codes
- split_codes(): Split a multi-code cell into a tuple of codes
"""

import math
import re
from typing import Any, Optional, Tuple

_CODE_SEPARATORS = re.compile(r"[\s,;]+")


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Safely convert a value to float, handling booleans and strings.

    Parameters
    ----------
    value : Any
        Value to convert to float
    default : float or None, optional
        Default value to return if conversion fails. If None (default),
        returns None on conversion failure.

    Returns
    -------
    float or None
        Converted float value, or default/None if conversion fails. NaN and
        common text representations of missing data return None.

    Examples
    --------
    >>> safe_float(42)
    42.0
    >>> safe_float("NA")
    >>> safe_float("invalid", default=0.0)
    0.0
    """
    if value is None:
        return None

    # Booleans are not valid numeric values
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        value = float(value)
        return None if math.isnan(value) else value

    if isinstance(value, str):
        value_lower = value.lower().strip()

        # Common missing data indicators
        if value_lower in ("none", "", "na", "nan", "n/a", "null"):
            return None

        try:
            return float(value)
        except ValueError:
            return default

    # numpy scalars and other numeric-like types
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return None if math.isnan(value) else value


def normalize_code(value: Any) -> Optional[str]:
    """Canonical string form of an FAO region or species category code.

    Integral floats (as produced by pandas for numeric columns with
    missing values) lose their trailing ``.0``.

    Examples
    --------
    >>> normalize_code(31.0)
    '31'
    >>> normalize_code(" 27 ")
    '27'
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or value.lower() in ("na", "nan", "none"):
            return None
        try:
            number = float(value)
        except ValueError:
            return value
        if number.is_integer():
            return str(int(number))
        return value
    number = safe_float(value)
    if number is None:
        return None
    if number.is_integer():
        return str(int(number))
    return str(number)


def split_codes(value: Any) -> Tuple[str, ...]:
    """Split a cell holding one or more codes into a tuple of codes.

    Codes may be separated by whitespace, commas or semicolons. Order is
    preserved and duplicates removed.

    Examples
    --------
    >>> split_codes("21 27")
    ('21', '27')
    >>> split_codes("31,34, 41")
    ('31', '34', '41')
    >>> split_codes(float("nan"))
    ()
    """
    if value is None:
        return ()
    if not isinstance(value, str):
        code = normalize_code(value)
        return (code,) if code is not None else ()

    codes = []
    for part in _CODE_SEPARATORS.split(value.strip()):
        code = normalize_code(part)
        if code is not None and code not in codes:
            codes.append(code)
    return tuple(codes)
