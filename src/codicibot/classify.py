"""Free-text classification into vehicle keys.

Matching is by fixed regular expressions over the whole (stripped)
message. ``None`` means the text is not a known vehicle.
"""

from __future__ import annotations

from codicibot._constants import BUS_NUMBER_RE, ROPEWAY_RE, TRAIN_STATION_RE
from codicibot.models.record import VehicleKey, VehicleKind


def match_ropeway(text: str) -> VehicleKey | None:
    value = text.strip()
    if ROPEWAY_RE.fullmatch(value) is None:
        return None
    # Ropeway endpoints are stored lower-cased.
    return VehicleKey(kind=VehicleKind.ROPEWAY, name=value.lower())


def match_bus(text: str) -> VehicleKey | None:
    value = text.strip()
    if BUS_NUMBER_RE.fullmatch(value) is None:
        return None
    return VehicleKey(kind=VehicleKind.BUS, name=value)


def match_train(text: str) -> VehicleKey | None:
    value = text.strip()
    if TRAIN_STATION_RE.fullmatch(value) is None:
        return None
    return VehicleKey(kind=VehicleKind.TRAIN, name=value)


def classify_query(text: str) -> VehicleKey | None:
    """Classify a lookup message: ropeways first, then buses, then train stations."""
    for matcher in (match_ropeway, match_bus, match_train):
        key = matcher(text)
        if key is not None:
            return key
    return None


def classify_feed(text: str) -> VehicleKey | None:
    """Classify the vehicle named in the feed dialogue: train stations first, then buses."""
    for matcher in (match_train, match_bus):
        key = matcher(text)
        if key is not None:
            return key
    return None
