from __future__ import annotations

import math

# Clicks up to 20% outside the drawn radius still count; pointer input on
# small targets is imprecise.
HOTSPOT_TOLERANCE = 1.2


def point_in_zone(
    click_x: float, click_y: float, zone_x: float, zone_y: float, radius: float
) -> bool:
    """True if the click lies within the zone's circle, tolerance included."""
    distance = math.hypot(click_x - zone_x, click_y - zone_y)
    return distance <= radius * HOTSPOT_TOLERANCE
