# --- src/dcsim_core/units.py ---
import logging
import math
from typing import Union

import pint

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.debug("Pint Unit Registry initialized.")


def to_si_magnitude(value: Union[int, float, str], unit: str) -> float:
    """
    Converts a raw parameter value into a plain float in SI base units.

    Plain numbers are taken to already be in SI units. Strings are parsed by
    Pint (e.g. "3 kohm", "2.5 mA", "1e-6") and converted to `unit`. A bare
    number inside a string is treated like a plain number.

    Raises:
        ValueError: If the value cannot be parsed, is not a real number, or has
                    a dimension incompatible with `unit`.
    """
    if isinstance(value, bool):
        raise ValueError(f"Boolean '{value}' is not a valid numeric parameter value.")
    if isinstance(value, (int, float)):
        return float(value)

    try:
        parsed = ureg.Quantity(value)
    except (pint.errors.PintError, AttributeError, TypeError, ValueError, SyntaxError) as e:
        raise ValueError(f"Could not parse '{value}' as a quantity: {e}") from e

    if parsed.dimensionless and not ureg.Quantity(1, unit).dimensionless:
        # A bare number string such as "1000" carries no unit; take it as SI.
        magnitude = parsed.to('dimensionless').magnitude
    else:
        try:
            magnitude = parsed.to(unit).magnitude
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Value '{value}' has dimensionality '{parsed.dimensionality}', "
                f"which is not compatible with '{unit}'."
            ) from e

    if isinstance(magnitude, complex):
        raise ValueError(f"Value '{value}' must be real.")
    magnitude = float(magnitude)
    if math.isnan(magnitude):
        raise ValueError(f"Value '{value}' is not a number.")
    return magnitude
