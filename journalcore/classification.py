"""
Signal Classification
=====================

Best-effort mapping from a signal's raw name/type to a SignalCategory.

The upstream taxonomy evolves independently of this package, so
anything not recognised lands in SignalCategory.OTHER rather than
failing. Hosts with a richer taxonomy inject their own Classifier
into SignalRecord.create(); this default only has to be pure.
"""

from __future__ import annotations
import re
from typing import Dict, Optional, Tuple

from .contracts.signals import SignalCategory


# Signal types present in newer journals
_TYPE_CATEGORIES: Dict[str, SignalCategory] = {
    'outpost': SignalCategory.STATION,
    'stationcoriolis': SignalCategory.STATION,
    'stationoneilcylinder': SignalCategory.STATION,
    'stationoneilorbis': SignalCategory.STATION,
    'stationbernalsphere': SignalCategory.STATION,
    'stationasteroid': SignalCategory.STATION,
    'stationdodec': SignalCategory.STATION,
    'stationmegaship': SignalCategory.MEGASHIP,
    'megaship': SignalCategory.MEGASHIP,
    'fleetcarrier': SignalCategory.CARRIER,
    'squadroncarrier': SignalCategory.CARRIER,
    'installation': SignalCategory.INSTALLATION,
    'combat': SignalCategory.CONFLICT_ZONE,
    'resourceextraction': SignalCategory.RESOURCE_EXTRACTION,
    'uss': SignalCategory.USS,
}

# Name prefixes used by older journals that carry no signal type
_NAME_PREFIXES: Tuple[Tuple[str, SignalCategory], ...] = (
    ('$uss', SignalCategory.USS),
    ('$fixed_event_life', SignalCategory.NOTABLE_STELLAR_PHENOMENA),
    ('$warzone', SignalCategory.CONFLICT_ZONE),
    ('$multiplayer_scenario14', SignalCategory.RESOURCE_EXTRACTION),
    ('$multiplayer_scenario77', SignalCategory.RESOURCE_EXTRACTION),
    ('$multiplayer_scenario78', SignalCategory.RESOURCE_EXTRACTION),
    ('$multiplayer_scenario79', SignalCategory.RESOURCE_EXTRACTION),
)

# Carrier callsigns end in XXX-XXX
_CARRIER_CALLSIGN = re.compile(r'(^|\s)[A-Z0-9]{3}-[A-Z0-9]{3}$')


def classify_signal(
    name: str,
    signal_type: Optional[str],
    is_station: bool,
    localised_name: Optional[str]
) -> SignalCategory:
    """
    Classify a signal. Pure: same inputs always give the same category.

    Precedence: explicit signal type, then name patterns for records
    written before signal types existed, then the station flag.
    """
    if signal_type:
        category = _TYPE_CATEGORIES.get(signal_type.lower())
        if category is not None:
            return category

    lowered = name.lower()
    for prefix, category in _NAME_PREFIXES:
        if lowered.startswith(prefix):
            return category

    if _CARRIER_CALLSIGN.search(name):
        return SignalCategory.CARRIER

    if is_station:
        return SignalCategory.STATION

    if localised_name and localised_name.lower().startswith('notable stellar phenomena'):
        return SignalCategory.NOTABLE_STELLAR_PHENOMENA

    return SignalCategory.OTHER
