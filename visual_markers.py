"""
Maps free-text shot and framing annotations onto layout hints.
"""
import re

from models import AspectRatio, VisualMarker

# Ordered: first matching kind wins.
MARKER_KEYWORDS: list[tuple[VisualMarker, tuple[str, ...]]] = [
    (VisualMarker.INSET, ("micro-flash", "inset")),
    (VisualMarker.SHATTERED, ("shattered", "fragments", "fragmented")),
    (VisualMarker.ECHO, ("echo", "shatter", "fracture")),
    (VisualMarker.HITCH, ("hitch", "stutter", "smear")),
    (VisualMarker.OVERFLOW, ("overflow", "bruise", "lattice")),
    (VisualMarker.SPLIT, ("split",)),
    (VisualMarker.SPLASH, ("splash", "full-page", "full page")),
    (VisualMarker.FULL_WIDTH, ("full-width", "full width")),
    (VisualMarker.LARGE, ("large", "larger")),
]

ASPECT_KEYWORDS: list[tuple[AspectRatio, tuple[str, ...]]] = [
    (AspectRatio.WIDE, ("wide", "landscape", "double", "establishing", "panoramic", "16:9", "exterior", "full-width", "full width")),
    (AspectRatio.TALL, ("tall", "vertical")),
    (AspectRatio.PORTRAIT, ("9:16", "portrait")),
    (AspectRatio.STD, ("close", "face", "tight", "4:3", "standard")),
    (AspectRatio.SQUARE, ("square", "1:1")),
]

SHOT_ALIASES = {
    "ECU": "EXTREME CLOSE UP",
    "CU": "CLOSE UP",
    "CLOSE ON": "CLOSE UP",
    "CLOSE-UP": "CLOSE UP",
    "WS": "WIDE SHOT",
    "WIDE ON": "WIDE SHOT",
    "WIDE": "WIDE SHOT",
    "EST.": "ESTABLISHING",
    "ESTABLISHING SHOT": "ESTABLISHING",
    "P.O.V.": "POV",
    "OTS": "OVER THE SHOULDER",
    "O.T.S.": "OVER THE SHOULDER",
    "MS": "MEDIUM SHOT",
    "MED.": "MEDIUM SHOT",
    "LS": "LONG SHOT",
    "2-SHOT": "TWO SHOT",
    "2 SHOT": "TWO SHOT",
    "INSERT SHOT": "INSERT",
    "TRACKING SHOT": "TRACKING",
    "PUSH IN ON": "PUSH IN",
    "PULL OUT": "PULL BACK",
    "AERIAL SHOT": "AERIAL",
}


def _contains(text: str, keyword: str) -> bool:
    return re.search(rf"(?<![a-z]){re.escape(keyword)}", text) is not None


def classify_visual_marker(text: str, modifier: str = "") -> VisualMarker:
    """
    Classify an annotation into a VisualMarker.

    Args:
        text: Annotation or panel description
        modifier: Extra qualifier such as the "(Split Panel)" of a panel line

    Returns:
        Matching marker, STANDARD when no keyword matches
    """
    combined = f"{text or ''} {modifier or ''}".lower()
    for marker, keywords in MARKER_KEYWORDS:
        if any(_contains(combined, keyword) for keyword in keywords):
            return marker
    return VisualMarker.STANDARD


def detect_aspect_ratio(description: str, modifier: str = "") -> AspectRatio:
    """Aspect-ratio hint for a panel; wide unless the text suggests otherwise."""
    combined = f"{description or ''} {modifier or ''}".lower()
    for ratio, keywords in ASPECT_KEYWORDS:
        if any(_contains(combined, keyword) for keyword in keywords):
            return ratio
    return AspectRatio.WIDE


def normalize_shot(shot_type: str) -> str:
    """Canonical camera-direction name ("CU" -> "CLOSE UP")."""
    upper = " ".join(shot_type.upper().split())
    return SHOT_ALIASES.get(upper, upper)
