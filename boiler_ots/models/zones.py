"""Grate air distribution: zone-to-roller split and the zone lock protocol.

The three zone percentages always sum to 100. Moving one zone slider gives
or takes the difference from a single other zone: the locked one stays put
and the remaining free zone absorbs the change.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from boiler_ots.logger import get_logger
from boiler_ots.models.plant_state import ZoneConfiguration, clip_setpoint

logger = get_logger(__name__)

ZONE_IDS = (1, 2, 3)


def calculate_roller_flows(
    z1: float, z2: float, z3: float,
    sub1: float = 50.0, sub2: float = 50.0, sub3: float = 50.0,
) -> List[float]:
    """Split three zone flows into six roller flows [R1..R6]."""
    rollers: List[float] = []
    for zone, split in ((z1, sub1), (z2, sub2), (z3, sub3)):
        rollers.append(zone * split / 100.0)
        rollers.append(zone * (100.0 - split) / 100.0)
    return rollers


def roller_flows(zones: ZoneConfiguration) -> List[float]:
    return calculate_roller_flows(
        zones.zone1, zones.zone2, zones.zone3,
        zones.sub_zone1, zones.sub_zone2, zones.sub_zone3,
    )


def _pivot(zone_id: int, locks: Dict[int, bool]) -> Optional[Tuple[int, int]]:
    """Return (fixed_id, flexible_id) for a move of zone_id, or None if blocked."""
    id_a, id_b = (z for z in ZONE_IDS if z != zone_id)
    if locks.get(id_a) and locks.get(id_b):
        return None
    if locks.get(id_a):
        return id_a, id_b
    if locks.get(id_b):
        return id_b, id_a
    return id_a, id_b


def update_zone(
    zones: ZoneConfiguration,
    locks: Dict[int, bool],
    zone_id: int,
    value: float,
) -> ZoneConfiguration:
    """Move one zone to ``value`` while keeping zone1 + zone2 + zone3 == 100.

    Locked zones cannot be moved. The value is clamped so the fixed zone
    keeps its share; the flexible zone takes whatever remains.
    """
    if zone_id not in ZONE_IDS or locks.get(zone_id):
        return zones

    pivot = _pivot(zone_id, locks)
    if pivot is None:
        return zones
    fixed_id, flexible_id = pivot

    fixed_val = zones.zone(fixed_id)
    new_value = clip_setpoint("zone", value)
    new_value = min(new_value, 100.0 - fixed_val)
    new_value = max(new_value, 0.0)
    flexible_val = 100.0 - fixed_val - new_value

    return replace(
        zones,
        **{f"zone{zone_id}": new_value, f"zone{flexible_id}": flexible_val},
    )


def update_sub_zone(zones: ZoneConfiguration, zone_id: int, value: float) -> ZoneConfiguration:
    if zone_id not in ZONE_IDS:
        return zones
    return replace(zones, **{f"sub_zone{zone_id}": clip_setpoint("sub_zone", value)})


def toggle_lock(locks: Dict[int, bool], zone_id: int) -> Dict[int, bool]:
    """Flip the lock on one zone; at least one zone always stays unlocked."""
    updated = {z: bool(locks.get(z, False)) for z in ZONE_IDS}
    if zone_id not in ZONE_IDS:
        return updated
    updated[zone_id] = not updated[zone_id]
    if all(updated.values()):
        logger.info("Refusing to lock zone %d: at least one zone must stay free", zone_id)
        updated[zone_id] = False
    return updated
