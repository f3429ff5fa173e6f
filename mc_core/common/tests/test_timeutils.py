import pytest

from mc_core.common.timeutils import slot_key, to_12_hour, to_24_hour


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2:30 PM", "14:30"),
        ("12:15 AM", "00:15"),
        ("12:00 PM", "12:00"),
        ("11:59 pm", "23:59"),
        ("9:05 AM", "09:05"),
        ("14:30", "14:30"),
        ("9:05", "09:05"),
    ],
)
def test_to_24_hour(raw, expected):
    assert to_24_hour(raw) == expected


def test_to_12_hour_round_trips_special_hours():
    assert to_12_hour("00:15") == "12:15 AM"
    assert to_12_hour("12:00") == "12:00 PM"
    assert to_12_hour("14:30") == "2:30 PM"
    assert to_12_hour("2:30 PM") == "2:30 PM"


def test_slot_key_orders_mixed_formats():
    slots = [("2025-06-01", "2:30 PM"), ("2025-06-01", "09:00"), ("2025-05-31", "11:00 PM")]
    ordered = sorted(slots, key=lambda s: slot_key(*s))
    assert ordered == [("2025-05-31", "11:00 PM"), ("2025-06-01", "09:00"), ("2025-06-01", "2:30 PM")]
