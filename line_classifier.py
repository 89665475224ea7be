"""
Line classification against ordered, data-driven pattern tables.

A pattern table is a sequence of ``LinePattern`` entries tried top to bottom;
the first entry whose regex matches (and whose ``build`` hook accepts the
match) decides the line's kind. Lines nothing recognizes are continuations.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence


class LineKind(str, Enum):
    PAGE_MARKER = "page-marker"
    PANEL_MARKER = "panel-marker"
    SCENE_HEADING = "scene-heading"
    CHARACTER_CUE = "character-cue"
    CONTINUATION = "continuation"
    VISUAL_MARKER = "visual-marker"
    EPISODE_MARKER = "episode-marker"
    ACT_BREAK = "act-break"
    BLANK = "blank"
    CAPTION = "caption"
    SFX = "sfx"
    SCREEN_TEXT = "screen-text"
    ARTIST_NOTE = "artist-note"
    TRANSITION = "transition"
    PARENTHETICAL = "parenthetical"
    TECHNICAL_CUE = "technical-cue"
    STAGE_DIRECTION = "stage-direction"
    ISSUE_INFO = "issue-info"
    SECTION_HEADER = "section-header"
    SCENE_MARKER = "scene-marker"
    END_MARKER = "end-marker"
    RULE = "rule"
    CAST_ENTRY = "cast-entry"


Builder = Callable[[re.Match], Optional[dict]]


@dataclass(frozen=True)
class LinePattern:
    """One recognizer in a dialect table.

    ``build`` turns the match into captured fields. Returning ``None``
    rejects the match and classification moves on to the next pattern.
    Without a builder the regex's named groups are the fields.
    """
    kind: LineKind
    regex: re.Pattern
    build: Optional[Builder] = None

    def apply(self, text: str) -> Optional[dict]:
        match = self.regex.match(text)
        if not match:
            return None
        if self.build is None:
            return {k: v for k, v in match.groupdict().items() if v is not None}
        return self.build(match)


@dataclass
class ClassifiedLine:
    """A source line together with what it was recognized as."""
    kind: LineKind
    text: str                 # Stripped line
    indent: int = 0           # Leading whitespace width, tabs count as 4
    fields: dict = field(default_factory=dict)


# ============= NUMBER TOKENS =============

_UNITS = [
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine",
    "ten", "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen",
    "seventeen", "eighteen", "nineteen",
]
_TENS = ["", "", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety"]


def _build_word_numbers() -> dict[str, int]:
    words = {word: value for value, word in enumerate(_UNITS) if value}
    for tens_index in range(2, 10):
        tens = _TENS[tens_index]
        words[tens] = tens_index * 10
        for unit in range(1, 10):
            # Stored without separators; lookups strip hyphens and spaces
            words[f"{tens}{_UNITS[unit]}"] = tens_index * 10 + unit
    return words


WORD_TO_NUM = _build_word_numbers()

# Alternation usable inside marker regexes, longest spellings first
NUMBER_WORD_PATTERN = "|".join(
    [f"{tens}[- ]?(?:{'|'.join(_UNITS[1:10])})" for tens in _TENS[2:]]
    + sorted((w for w in WORD_TO_NUM if w in _UNITS or w in _TENS), key=len, reverse=True)
)

_ROMAN_VALUES = {"i": 1, "v": 5, "x": 10, "l": 50, "c": 100, "d": 500, "m": 1000}
_ROMAN_RE = re.compile(r"^[ivxlcdm]+$", re.IGNORECASE)


def parse_roman(token: str) -> Optional[int]:
    """Parse a roman numeral, or return None if ``token`` isn't one."""
    token = token.strip().lower()
    if not token or not _ROMAN_RE.match(token):
        return None
    total = 0
    previous = 0
    for char in reversed(token):
        value = _ROMAN_VALUES[char]
        if value < previous:
            total -= value
        else:
            total += value
            previous = value
    return total or None


def parse_number_token(token: Optional[str], allow_roman: bool = False) -> Optional[int]:
    """
    Parse a page/act/scene number token.

    Accepts digits and spelled-out numbers ("ONE", "twenty-one",
    "TWENTY ONE"); roman numerals only when ``allow_roman`` is set.

    Returns:
        The number, or None when the token is missing or unrecognized
    """
    if not token:
        return None
    cleaned = token.strip().strip("*#.:").strip()
    if cleaned.isdigit():
        return int(cleaned)
    compact = re.sub(r"[-\s]+", "", cleaned.lower())
    if compact in WORD_TO_NUM:
        return WORD_TO_NUM[compact]
    if allow_roman:
        return parse_roman(cleaned)
    return None


def number_to_word(value: int) -> str:
    """Upper-case English spelling for 1..99 ("TWENTY-ONE")."""
    if value < 20:
        return _UNITS[value].upper()
    tens, unit = divmod(value, 10)
    if not unit:
        return _TENS[tens].upper()
    return f"{_TENS[tens]}-{_UNITS[unit]}".upper()


# ============= CHARACTER CUES =============

# Words that look like cues but never name a speaker
RESERVED_CUE_WORDS = frozenset([
    "CAPTION", "SFX", "SOUND", "FX", "AUDIO", "NOTE", "ARTIST NOTE", "PROMPT", "REF",
    "PAGE", "PANEL", "FRAME", "ON SCREEN", "ON WALL", "ON BOARD", "LABEL", "READOUT",
    "TITLE", "SUBTITLE", "TEXT", "NARRATION", "DESCRIPTION", "ACTION", "LAYOUT",
    "SHOT", "MARKER", "FRAMING", "LIGHTS", "LIGHT", "MUSIC", "BLACKOUT", "CURTAIN",
    "FADE IN", "FADE OUT", "FADE TO BLACK", "CUT TO", "DISSOLVE TO", "SMASH CUT",
    "MATCH CUT", "TIME CUT", "CONTINUED", "MORE", "CONT'D", "THE END", "END",
    "SUPER", "CHYRON", "INTERCUT", "BACK TO", "LATER", "MOMENTS LATER", "FLASHBACK",
    "END FLASHBACK", "BEGIN", "FREEZE FRAME", "SPLIT SCREEN", "MONTAGE",
    "END MONTAGE", "SERIES OF SHOTS", "DREAM SEQUENCE", "END DREAM", "RESUME",
    "TIMELINE", "WRITTEN BY", "SETTING", "TIME", "PLACE", "EPISODE",
    "ANGLE ON", "CLOSE ON", "CLOSE UP", "EXTREME CLOSE UP", "WIDE SHOT", "WIDE",
    "ESTABLISHING", "INSERT", "POV", "TWO SHOT", "OVER THE SHOULDER", "TRACKING",
    "MEDIUM SHOT", "LONG SHOT", "FULL SHOT", "LOW ANGLE", "HIGH ANGLE", "AERIAL",
])

THOUGHT_MODIFIERS = ("thought", "thinking", "inner", "internal", "v.o.", "vo", "voice over", "voice-over")


def is_reserved_cue(name: str) -> bool:
    upper = " ".join(name.upper().split())
    return upper in RESERVED_CUE_WORDS


def clean_dialogue_text(text: str) -> str:
    """Strip trailing markdown emphasis and surrounding whitespace."""
    return re.sub(r"\*+$", "", text).strip()


def is_thought_modifier(modifier: Optional[str]) -> bool:
    if not modifier:
        return False
    lower = modifier.lower()
    return any(re.search(rf"(?<![a-z]){re.escape(m)}(?![a-z])", lower) for m in THOUGHT_MODIFIERS)


def cue_fields(name: str, modifier: Optional[str], text: Optional[str]) -> Optional[dict]:
    """Normalized fields for a cue match, or None for reserved words."""
    name = " ".join(name.replace("*", "").split())
    if not name or is_reserved_cue(name) or name.isdigit():
        return None
    fields = {"name": name}
    if modifier and modifier.strip():
        fields["modifier"] = modifier.strip()
    if text is not None:
        cleaned = clean_dialogue_text(text)
        if cleaned:
            fields["text"] = cleaned
    return fields


# ============= CLASSIFICATION =============

def measure_indent(raw_line: str) -> int:
    """Width of the leading whitespace of ``raw_line``."""
    width = 0
    for char in raw_line:
        if char == " ":
            width += 1
        elif char == "\t":
            width += 4
        else:
            break
    return width


def classify_line(line: str, patterns: Sequence[LinePattern]) -> ClassifiedLine:
    """
    Classify one raw line against an ordered pattern table.

    Args:
        line: Raw source line, with or without its line ending
        patterns: Dialect table; the first accepting pattern wins

    Returns:
        ClassifiedLine; CONTINUATION when nothing matches, BLANK for
        whitespace-only lines
    """
    text = line.strip()
    indent = measure_indent(line)
    if not text:
        return ClassifiedLine(LineKind.BLANK, "", indent)

    for pattern in patterns:
        fields = pattern.apply(text)
        if fields is not None:
            return ClassifiedLine(pattern.kind, text, indent, fields)

    return ClassifiedLine(LineKind.CONTINUATION, text, indent)
