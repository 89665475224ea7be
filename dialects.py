"""
Pattern tables and assembly options for each script dialect.

Tables are plain tuples of LinePattern, so a dialect can be built by
concatenating others (the TV table is the episode and act patterns in
front of the screenplay table).
"""
import re
from dataclasses import dataclass
from typing import Literal, Optional

from line_classifier import (
    NUMBER_WORD_PATTERN,
    LineKind,
    LinePattern,
    cue_fields,
    number_to_word,
    parse_number_token,
)
from models import ActType, Dialect, VisualMarker
from visual_markers import classify_visual_marker

IGNORECASE = re.IGNORECASE

# Shared with the TV pre-pass, which counts scene headings as pages
SCENE_HEADING_RE = re.compile(
    r'^(?:\d+[A-Z]?\s+)?(?P<int_ext>INT\.?/EXT\.?|EXT\.?/INT\.?|I\.?/E\.?|INT\.|EXT\.)\s*'
    r'(?P<location>.+?)(?:\s+[-–—]{1,2}\s+(?P<time_of_day>[^-–—]+?))?\s*$',
    IGNORECASE
)


def is_scene_heading(text: str) -> bool:
    return bool(SCENE_HEADING_RE.match(text.strip()))


# ============= BUILDERS =============

def _page_fields(match: re.Match) -> dict:
    return {name: value.strip() for name, value in match.groupdict().items() if value and value.strip()}


def _panel_fields(match: re.Match) -> dict:
    groups = match.groupdict()
    fields = {}
    if groups.get("number"):
        fields["number"] = groups["number"]
    modifier = (groups.get("modifier") or "").strip()
    if modifier:
        fields["modifier"] = modifier
    rest = (groups.get("rest") or "").strip().strip("*").strip()
    if rest:
        fields["description"] = rest
    return fields


def _cue(match: re.Match) -> Optional[dict]:
    groups = match.groupdict()
    if is_scene_heading(match.string):
        return None
    return cue_fields(groups["name"], groups.get("modifier"), groups.get("text"))


def _standalone_cue(match: re.Match) -> Optional[dict]:
    name = match.group("name").strip()
    letters = [c for c in name if c.isalpha()]
    if len(letters) < 2 or len(name.split()) > 4:
        return None
    return _cue(match)


def _annotation(match: re.Match) -> dict:
    return {"annotation": match.group("annotation").strip()}


def _marked_annotation(match: re.Match) -> Optional[dict]:
    """Bracketed annotation; only claims the line if it names a marker."""
    annotation = match.group("annotation").strip()
    if len(annotation.split()) > 4 or classify_visual_marker(annotation) == VisualMarker.STANDARD:
        return None
    return {"annotation": annotation}


def _shot(match: re.Match) -> dict:
    fields = {"shot": match.group("shot")}
    subject = (match.groupdict().get("subject") or "").strip()
    if subject:
        fields["subject"] = subject
    return fields


def _whole_line(key: str):
    def build(match: re.Match) -> dict:
        return {key: match.group(0).strip()}
    return build


def _act(is_end: bool):
    def build(match: re.Match) -> Optional[dict]:
        groups = match.groupdict()
        if groups.get("number"):
            number = parse_number_token(groups["number"], allow_roman=True)
            if number is None or not 1 <= number <= 5:
                return None
            act = ActType(f"ACT {number_to_word(number)}")
        else:
            name = " ".join(groups["act"].upper().split())
            act = ActType.TEASER if name == "COLD OPEN" else ActType(name)
        return {"act": act, "is_end": is_end}
    return build


def _episode(match: re.Match) -> Optional[dict]:
    groups = match.groupdict()
    episode = parse_number_token(groups["episode"])
    if episode is None:
        return None
    if groups.get("season"):
        number = f"{groups['season']}x{groups['episode']}"
    else:
        number = groups["episode"] if groups["episode"].isdigit() else str(episode)
    fields = {"episode": number}
    title = _quoted_title(groups.get("rest") or "")
    if title:
        fields["title"] = title
    return fields


QUOTED_TITLE_RE = re.compile(r'["“](.+?)["”]|(?<![A-Za-z])\'(.+?)\'(?![A-Za-z])')


def _quoted_title(text: str) -> Optional[str]:
    match = QUOTED_TITLE_RE.search(text)
    if not match:
        return None
    title = (match.group(1) or match.group(2) or "").strip()
    return title or None


def _stage_number(match: re.Match) -> Optional[dict]:
    token = match.group("number")
    number = parse_number_token(token, allow_roman=True)
    if number is None:
        return None
    fields = {"number": number, "label": match.group(0).strip()}
    return fields


def _stage_direction(match: re.Match) -> dict:
    fields = {"direction": match.group("direction").strip()}
    rest = match.group("rest").strip()
    if rest:
        fields["rest"] = rest
    return fields


def _issue(key: str, cast=None):
    def build(match: re.Match) -> dict:
        fields = {}
        for name, value in match.groupdict().items():
            if value is not None and value.strip():
                fields[name] = cast(value) if cast and name == key else value.strip()
        fields["field"] = key
        return fields
    return build


def _section(name: str):
    def build(match: re.Match) -> dict:
        return {"section": name}
    return build


# ============= SHARED FRAGMENTS =============

_NUM = rf'(?:{NUMBER_WORD_PATTERN}|\d+)'
_MODIFIER = r'(?:\s*[(\[<](?P<modifier>[^)\]>]+)[)\]>])?'
_CAPS_NAME = r"(?P<name>[A-Z][A-Z0-9 \-'.]{0,30}?)"
_MIXED_NAME = r"(?P<name>[A-Z][a-zA-Z'\-.]*(?: [A-Z][a-zA-Z'\-.]*){0,2})"

_LONG_SHOTS = (
    r"EXTREME CLOSE UP|CLOSE UP|CLOSE ON|ANGLE ON|WIDE SHOT|WIDE ON|ESTABLISHING SHOT|ESTABLISHING|"
    r"INSERT SHOT|INSERT|TWO SHOT|2-SHOT|2 SHOT|OVER THE SHOULDER|TRACKING SHOT|TRACKING|PAN TO|"
    r"PUSH IN ON|PUSH IN|PULL BACK|PULL OUT|MEDIUM SHOT|LONG SHOT|FULL SHOT|LOW ANGLE|HIGH ANGLE|"
    r"DUTCH ANGLE|CANTED|TILTED|CRANE SHOT|DOLLY|AERIAL SHOT|AERIAL|BIRD'S EYE|POV|P\.O\.V\."
)
_SHORT_SHOTS = r"ECU|CU|WS|WIDE|EST\.|OTS|O\.T\.S\.|MS|MED\.|LS|PAN"

RULE_PATTERNS = (
    LinePattern(LineKind.RULE, re.compile(r'^(?:-{3,}|\*{3,}|_{3,})$')),
)

# ============= COMIC =============

COMIC_PATTERNS = RULE_PATTERNS + (
    # Pages, ahead of the "# Title" line so "# PAGE 1" is a page
    LinePattern(LineKind.PAGE_MARKER, re.compile(
        r'^(?:#{1,3}\s*)?(?:\*\*)?\s*(?:PAGE|PG)\b\.?'
        rf'(?:\s+(?P<token>{_NUM}|[^\s*():.\-–—]+))?'
        r'\s*(?:\([^)]*\))?\s*(?:\*\*)?'
        r'(?:\s*(?::|\s[-–—])\s*(?:\*\*)?\s*(?P<title>[^*\s].*?))?'
        r'\s*(?:\*\*)?\s*[:.\-]?\s*$', IGNORECASE),
        _page_fields),
    # Title block
    LinePattern(LineKind.ISSUE_INFO, re.compile(
        r'^##\s+Issue\s+#?(?P<issue_number>\d+)(?:\s*[:\-]\s*["\'“]?(?P<subtitle>.+?)["\'”]?)?$', IGNORECASE),
        _issue("issue_number", int)),
    LinePattern(LineKind.ISSUE_INFO, re.compile(r'^#\s+(?P<title>[^#].*)$'), _issue("title")),
    LinePattern(LineKind.ISSUE_INFO, re.compile(
        r'^\*\*Written by\s+(?P<writer>.+?)\*\*$', IGNORECASE), _issue("writer")),
    LinePattern(LineKind.ISSUE_INFO, re.compile(
        r'^(?P<page_count>\d+)\s+Pages?\s*\|', IGNORECASE), _issue("page_count", int)),
    LinePattern(LineKind.ISSUE_INFO, re.compile(
        r'^\*\*Timeline:\s*(?P<timeline>.+?)\*\*$', IGNORECASE), _issue("timeline")),
    # Sections
    LinePattern(LineKind.SECTION_HEADER, re.compile(r'^###\s*CAST\s+OF\s+CHARACTERS', IGNORECASE), _section("cast")),
    LinePattern(LineKind.SECTION_HEADER, re.compile(r'^###\s*(?:ARTIST|COLORIST)', IGNORECASE), _section("notes")),
    # Panels
    LinePattern(LineKind.PANEL_MARKER, re.compile(
        r'^\*\*Panel\s+(?P<number>\d+)\*\*(?:\s*\((?P<modifier>[^)]+)\))?\s*[:\-.]?\s*(?P<rest>.*)$', IGNORECASE),
        _panel_fields),
    LinePattern(LineKind.PANEL_MARKER, re.compile(
        r'^\*\*Panel\s+(?P<number>\d+)(?:\s*\((?P<modifier>[^)]+)\))?\s*[:\-.]?\s*\*\*\s*(?P<rest>.*)$', IGNORECASE),
        _panel_fields),
    LinePattern(LineKind.PANEL_MARKER, re.compile(
        r'^(?:PANEL|FRAME|BLOCK|FR|P)\s*(?P<number>\d+)\s*(?:[\[(](?P<modifier>[^\])]+)[\])])?'
        r'\s*[:\-.]?\s*(?P<rest>.*)$', IGNORECASE),
        _panel_fields),
    LinePattern(LineKind.PANEL_MARKER, re.compile(
        r'^(?:\*\*)?\s*(?:PANEL|FRAME)\s*(?:\*\*)?\s*(?:[\[(](?P<modifier>[^\])]+)[\])])?'
        r'\s*(?:\*\*)?\s*[:\-.]?\s*$', IGNORECASE),
        _panel_fields),
    LinePattern(LineKind.PANEL_MARKER, re.compile(r'^(?P<number>\d{1,2})\.(?:\s+(?P<rest>.*))?$'), _panel_fields),
    # Layout annotations
    LinePattern(LineKind.VISUAL_MARKER, re.compile(
        r'^(?:SHOT|LAYOUT|MARKER|FRAMING)\s*[:\-]\s*(?P<annotation>.+)$', IGNORECASE), _annotation),
    LinePattern(LineKind.VISUAL_MARKER, re.compile(
        r'^(?P<annotation>(?:SPLASH|INSET|MICRO-FLASH|FULL[- ]WIDTH|FULL[- ]PAGE|ECHO|HITCH|OVERFLOW|'
        r'SHATTERED|SPLIT|LARGE)(?:\s+(?:PAGE|PANEL|INSET|SHOT))?)[.!:]?$', IGNORECASE), _annotation),
    LinePattern(LineKind.VISUAL_MARKER, re.compile(r'^\[(?P<annotation>[^\]]+)\]$'), _marked_annotation),
    LinePattern(LineKind.VISUAL_MARKER, re.compile(r'^\((?P<annotation>[^)]+)\)$'), _marked_annotation),
    # Lettering
    LinePattern(LineKind.CAPTION, re.compile(
        rf'^(?:>\s*)?(?:\*\*)?CAPTION{_MODIFIER}\s*(?:\*\*)?\s*[:\-]\s*(?:\*\*)?\s*(?P<text>.+)$', IGNORECASE)),
    LinePattern(LineKind.SFX, re.compile(
        r'^(?:>\s*)?(?:\*\*)?SFX\s*(?:\*\*)?\s*[:\-]\s*(?:\*\*)?\s*(?P<text>.+)$', IGNORECASE)),
    LinePattern(LineKind.SCREEN_TEXT, re.compile(
        r'^(?:>\s*)?(?:\*\*)?(?P<modifier>ON\s+SCREEN|ON\s+WALL|ON\s+BOARD|LABEL|ON\s+PHONE|ON\s+TV|READOUT|'
        r'DRONE\s+SCREEN|DRONE\s+FEED)(?:\s*[(\[<][^)\]>]+[)\]>])?\s*(?:\*\*)?\s*[:\-]\s*(?:\*\*)?\s*(?P<text>.+)$', IGNORECASE)),
    # Artist notes
    LinePattern(LineKind.ARTIST_NOTE, re.compile(r'^\*\((?P<note>[^)]+)\)\*$')),
    LinePattern(LineKind.ARTIST_NOTE, re.compile(r'^\((?P<note>[^)]+)\)$')),
    LinePattern(LineKind.ARTIST_NOTE, re.compile(r'^(?:Artist\s*note|NOTE|PROMPT|REF)\s*[:\-]\s*(?P<note>.+)$', IGNORECASE)),
    # "**NAME** description" entries of a cast list
    LinePattern(LineKind.CAST_ENTRY, re.compile(
        r"^\*\*(?P<name>[A-Z][A-Z\s\-'.]+)\*\*\s+(?P<description>[^\s:\-—].*)$")),
    # Cues
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        rf'^(?:>\s*)?(?:\*\*)?{_CAPS_NAME}{_MODIFIER}\s*(?:\*\*)?\s*(?::|\s[-—]|—)\s*(?:\*\*)?\s*(?P<text>.*)$'),
        _cue),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        rf'^(?:>\s*)?(?:\*\*)?{_MIXED_NAME}\s*(?:\((?P<modifier>[^)]+)\))?\s*(?:\*\*)?:(?:\*\*)?\s*(?P<text>.+)$'),
        _cue),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        r"^(?P<name>[A-Z][A-Z0-9 \-']{1,30}?)\s*(?:\((?P<modifier>[^)]+)\))?$"),
        _standalone_cue),
)

# ============= SCREENPLAY =============

SCREENPLAY_PATTERNS = (
    LinePattern(LineKind.SCENE_HEADING, SCENE_HEADING_RE),
    LinePattern(LineKind.TRANSITION, re.compile(
        r'^(?P<transition>HARD CUT TO|JUMP CUT TO|SMASH CUT TO|MATCH CUT TO|TIME CUT TO|CUT TO|FADE TO BLACK|'
        r'FADE TO|FADE OUT|FADE IN|DISSOLVE TO|CROSSFADE TO|SMASH CUT|MATCH CUT|WIPE TO|TIME CUT|'
        r'IRIS IN|IRIS OUT|END OF SCENE)[.:]?$', IGNORECASE)),
    LinePattern(LineKind.VISUAL_MARKER, re.compile(rf"^(?P<shot>{_LONG_SHOTS}|{_SHORT_SHOTS})\s*[.:]?$"), _shot),
    LinePattern(LineKind.VISUAL_MARKER, re.compile(
        rf"^(?P<shot>{_LONG_SHOTS})(?:\s*[-–—:]\s*|\s+)(?P<subject>.+)$"), _shot),
    LinePattern(LineKind.VISUAL_MARKER, re.compile(
        rf"^(?P<shot>{_SHORT_SHOTS})\s*[-–—:]\s*(?P<subject>.*)$"), _shot),
    LinePattern(LineKind.SFX, re.compile(r'^(?:SFX|SOUND|AUDIO|FX)\s*[:–—-]\s*(?P<text>.+)$', IGNORECASE)),
    LinePattern(LineKind.PARENTHETICAL, re.compile(r'^\((?P<text>[^)]+)\)$')),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        r"^(?P<name>[A-Z][A-Z0-9 '.\-]{0,35}?)\s*(?:\((?P<modifier>[^)]+)\))?$"),
        _standalone_cue),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        rf'^{_CAPS_NAME}{_MODIFIER}\s*:\s*(?P<text>.+)$'),
        _cue),
)

# ============= TV SERIES =============

_ACT_NUMBER = r'(?P<number>ONE|TWO|THREE|FOUR|FIVE|[1-5]|IV|V|I{1,3})'

ACT_PATTERNS = (
    LinePattern(LineKind.ACT_BREAK, re.compile(rf'^END\s+(?:OF\s+)?ACT\s+{_ACT_NUMBER}[.:]?$', IGNORECASE), _act(True)),
    LinePattern(LineKind.ACT_BREAK, re.compile(
        r'^END\s+(?:OF\s+)?(?:THE\s+)?(?P<act>TEASER|COLD\s+OPEN|TAG|EPILOGUE)[.:]?$', IGNORECASE), _act(True)),
    LinePattern(LineKind.ACT_BREAK, re.compile(r'^(?P<act>TEASER|COLD\s+OPEN)[.:]?$', IGNORECASE), _act(False)),
    LinePattern(LineKind.ACT_BREAK, re.compile(rf'^ACT\s+{_ACT_NUMBER}[.:]?$', IGNORECASE), _act(False)),
    LinePattern(LineKind.ACT_BREAK, re.compile(r'^(?P<act>TAG|EPILOGUE)[.:]?$', IGNORECASE), _act(False)),
)

EPISODE_PATTERNS = (
    LinePattern(LineKind.EPISODE_MARKER, re.compile(
        r'^EPISODE\s+#?(?P<season>\d+)x(?P<episode>\d+)\b(?P<rest>.*)$', IGNORECASE), _episode),
    LinePattern(LineKind.EPISODE_MARKER, re.compile(
        rf'^EPISODE\s+#?(?P<episode>{_NUM})\b(?P<rest>.*)$', IGNORECASE), _episode),
    LinePattern(LineKind.EPISODE_MARKER, re.compile(r'^EP\.?\s*#?(?P<episode>\d+)\b(?P<rest>.*)$', IGNORECASE), _episode),
    LinePattern(LineKind.EPISODE_MARKER, re.compile(r'^(?P<season>\d+)x(?P<episode>\d+)\b(?P<rest>.*)$', IGNORECASE), _episode),
)

TV_PATTERNS = EPISODE_PATTERNS + ACT_PATTERNS + SCREENPLAY_PATTERNS

# ============= STAGE PLAY =============

STAGE_PLAY_PATTERNS = (
    LinePattern(LineKind.END_MARKER, re.compile(r'^\[?END\s+OF\s+(?:ACT|SCENE|PLAY)\b.*$', IGNORECASE)),
    LinePattern(LineKind.END_MARKER, re.compile(r'^(?:CURTAIN|BLACKOUT|THE\s+END|FINIS?|FINALE?)[.!]?$', IGNORECASE)),
    LinePattern(LineKind.ACT_BREAK, re.compile(rf'^ACT\s*(?P<number>{_NUM}|[IVXLCDM]+)\b.*$', IGNORECASE), _stage_number),
    LinePattern(LineKind.SCENE_MARKER, re.compile(rf'^SCENE\s*(?P<number>{_NUM}|[IVXLCDM]+)\b.*$', IGNORECASE), _stage_number),
    LinePattern(LineKind.TECHNICAL_CUE, re.compile(r'^(?:LIGHTS?|SOUND|MUSIC|SFX)\s*[:.\-—]\s*.+$', IGNORECASE), _whole_line("cue")),
    LinePattern(LineKind.TECHNICAL_CUE, re.compile(r'^CURTAIN\s+(?:UP|DOWN|OPENS?|CLOSES?|RISES|FALLS)[.!]?$', IGNORECASE),
                _whole_line("cue")),
    LinePattern(LineKind.TECHNICAL_CUE, re.compile(r'^\[(?:LIGHTS?|SOUND|MUSIC)\s+.+\]$', IGNORECASE), _whole_line("cue")),
    LinePattern(LineKind.STAGE_DIRECTION, re.compile(r'^[\[(](?P<direction>[^\])]+)[\])]\s*(?P<rest>.*)$'),
                _stage_direction),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        r"^(?P<name>[A-Z][A-Z0-9 '.\-]{0,30})(?:\s*\((?P<modifier>[^)]+)\))?\s*[:.—]\s*(?P<text>.+)$"),
        _cue),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        rf'^{_MIXED_NAME}\s*(?:\((?P<modifier>[^)]+)\))?\s*:\s*(?P<text>.+)$'),
        _cue),
    LinePattern(LineKind.CHARACTER_CUE, re.compile(
        r"^(?P<name>[A-Z][A-Z0-9 '\-]{1,30}?)\s*(?:\((?P<modifier>[^)]+)\))?$"),
        _standalone_cue),
)


# ============= PROFILES =============

@dataclass(frozen=True)
class DialectProfile:
    """How the assembler treats one dialect."""
    dialect: Dialect
    patterns: tuple
    page_opens_panel: bool = False      # Scene headings start an establishing panel
    shot_opens_panel: bool = False      # Camera directions start a new panel
    implicit_structure: bool = False    # Content outside a page/panel creates one
    dialogue_ends_on: Literal["indent", "blank"] = "indent"
    sfx_as_note: bool = False           # SFX lines annotate the panel instead of lettering it
    empty_message: str = "No story structure detected."


PROFILES: dict[Dialect, DialectProfile] = {
    Dialect.COMIC: DialectProfile(
        dialect=Dialect.COMIC,
        patterns=COMIC_PATTERNS,
        empty_message='No story structure detected. Ensure pages start with "PAGE 1" or "### PAGE ONE" '
                      'and panels with "Panel 1" or "**Panel 1**".',
    ),
    Dialect.SCREENPLAY: DialectProfile(
        dialect=Dialect.SCREENPLAY,
        patterns=SCREENPLAY_PATTERNS,
        page_opens_panel=True,
        shot_opens_panel=True,
        dialogue_ends_on="blank",
        sfx_as_note=True,
        empty_message="No scenes detected. Screenplay scenes should start with INT. or EXT. scene headings.",
    ),
    Dialect.TV_SERIES: DialectProfile(
        dialect=Dialect.TV_SERIES,
        patterns=TV_PATTERNS,
        page_opens_panel=True,
        shot_opens_panel=True,
        dialogue_ends_on="blank",
        sfx_as_note=True,
        empty_message="No scenes detected. TV scripts should start scenes with INT. or EXT. scene headings.",
    ),
    Dialect.STAGE_PLAY: DialectProfile(
        dialect=Dialect.STAGE_PLAY,
        patterns=STAGE_PLAY_PATTERNS,
        implicit_structure=True,
        dialogue_ends_on="blank",
        empty_message='No scenes detected. Stage plays should include "SCENE 1" or similar markers, '
                      'or dialogue in the format "CHARACTER: text".',
    ),
}


def get_profile(dialect) -> DialectProfile:
    """Profile for a Dialect or its string value; raises ValueError if unknown."""
    return PROFILES[Dialect(dialect)]
