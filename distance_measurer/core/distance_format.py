"""Two-tier distance formatting for map labels.

Below 1000 m a distance is rendered in meters at the requested number of
decimal places. At or above 1000 m it is rounded to the nearest 100 m and
rendered in kilometers (one decimal at most, no trailing ".0").

Examples:
    format_distance(999, 0)  -> "999米"
    format_distance(1000, 0) -> "1公里"
    format_distance(1450, 0) -> "1.5公里"
    format_distance(12.34, 1) -> "12.3米"

Rounding is half-up in both tiers, so 1450 m becomes 1.5 km. With a
precision above 0 the kilometer tier rounds the meter-rounded value, at
precision 0 it rounds the distance itself (1049.6 m is 1 km).
"""

from decimal import ROUND_HALF_UP, Decimal
from math import ceil, isfinite

from distance_measurer.constants import UnitConfig


def format_distance(distance_m: float, precision: float = 0) -> str:
    """Format a distance in meters as a display string.

    Args:
        distance_m: Nonnegative distance in meters
        precision: Decimal places for the meter tier (fractional values are
            rounded up, negative values are treated as 0)

    Returns:
        Formatted distance with unit label.
    """
    if not isfinite(distance_m) or distance_m < 0:
        raise ValueError(f"Distance must be a finite nonnegative number, got {distance_m}")

    places = max(0, ceil(precision))
    rounded = Decimal(str(distance_m)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)

    if rounded < UnitConfig.KILOMETER_THRESHOLD_M:
        return f"{rounded}{UnitConfig.METERS}"

    # Whole multiples of 100m, expressed as tenths of a kilometer. At
    # precision 0 the meter rounding only picks the tier
    kilometer_source = rounded if places > 0 else Decimal(str(distance_m))
    tenths = int((kilometer_source / UnitConfig.KILOMETER_ROUNDING_M).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    whole, fraction = divmod(tenths, 10)
    km_text = f"{whole}" if fraction == 0 else f"{whole}.{fraction}"
    return f"{km_text}{UnitConfig.KILOMETERS}"
