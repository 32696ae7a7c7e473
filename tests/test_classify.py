from __future__ import annotations

import pytest

from codicibot.classify import classify_feed, classify_query
from codicibot.models.record import VehicleKey, VehicleKind


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("420", VehicleKey(kind=VehicleKind.BUS, name="420")),
        (" 4201 ", VehicleKey(kind=VehicleKind.BUS, name="4201")),
        ("Trento", VehicleKey(kind=VehicleKind.TRAIN, name="Trento")),
        ("trento nord", VehicleKey(kind=VehicleKind.TRAIN, name="trento nord")),
        ("Borgo Est", VehicleKey(kind=VehicleKind.TRAIN, name="Borgo Est")),
        ("malè", VehicleKey(kind=VehicleKind.TRAIN, name="malè")),
        ("Funivia Trento", VehicleKey(kind=VehicleKind.ROPEWAY, name="funivia trento")),
        ("funivia SARDAGNA", VehicleKey(kind=VehicleKind.ROPEWAY, name="funivia sardagna")),
    ],
)
def test_classify_query(text: str, expected: VehicleKey) -> None:
    assert classify_query(text) == expected


@pytest.mark.parametrize("text", ["", "42", "12345", "bus 420", "trento centro", "funivia", "TT123", "٤٢٠", "４２０"])
def test_classify_query_unclassified(text: str) -> None:
    assert classify_query(text) is None


def test_classify_feed_prefers_train_and_skips_ropeway() -> None:
    assert classify_feed("Povo") == VehicleKey(kind=VehicleKind.TRAIN, name="Povo")
    assert classify_feed("420") == VehicleKey(kind=VehicleKind.BUS, name="420")
    assert classify_feed("funivia trento") is None
