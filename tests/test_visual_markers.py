import pytest

from models import AspectRatio, VisualMarker
from visual_markers import classify_visual_marker, detect_aspect_ratio, normalize_shot


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Splash page", VisualMarker.SPLASH),
        ("A shattered mirror", VisualMarker.SHATTERED),
        ("An echo of the past", VisualMarker.ECHO),
        ("micro-flash of the gun", VisualMarker.INSET),
        ("Full-width shot of the skyline", VisualMarker.FULL_WIDTH),
        ("A larger panel", VisualMarker.LARGE),
        ("A plain street", VisualMarker.STANDARD),
        ("", VisualMarker.STANDARD),
    ],
)
def test_classify_visual_marker(text, expected):
    assert classify_visual_marker(text) == expected


def test_modifier_takes_part_in_classification():
    assert classify_visual_marker("", "Split Panel") == VisualMarker.SPLIT
    assert classify_visual_marker("Alice runs", "Inset") == VisualMarker.INSET


@pytest.mark.parametrize(
    "description, expected",
    [
        ("Wide establishing shot of the harbor", AspectRatio.WIDE),
        ("Close on her face", AspectRatio.STD),
        ("A tall tower", AspectRatio.TALL),
        ("Portrait framing", AspectRatio.PORTRAIT),
        ("A square room", AspectRatio.SQUARE),
        ("Nothing in particular", AspectRatio.WIDE),
    ],
)
def test_detect_aspect_ratio(description, expected):
    assert detect_aspect_ratio(description) == expected


def test_normalize_shot():
    assert normalize_shot("cu") == "CLOSE UP"
    assert normalize_shot("Close  on") == "CLOSE UP"
    assert normalize_shot("ANGLE ON") == "ANGLE ON"
