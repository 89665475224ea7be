"""
Data models for the script-to-storyboard parser.
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


class Dialect(str, Enum):
    """Script conventions the parser understands."""
    COMIC = "comic"
    SCREENPLAY = "screenplay"
    STAGE_PLAY = "stage-play"
    TV_SERIES = "tv-series"


class VisualMarker(str, Enum):
    """Closed set of layout hints shared with the editor."""
    STANDARD = "standard"
    ECHO = "echo"
    HITCH = "hitch"
    OVERFLOW = "overflow"
    SHATTERED = "shattered"
    SPLIT = "split"
    SPLASH = "splash"
    INSET = "inset"
    LARGE = "large"
    FULL_WIDTH = "full-width"


class AspectRatio(str, Enum):
    WIDE = "wide"
    STD = "std"
    SQUARE = "square"
    TALL = "tall"
    PORTRAIT = "portrait"


class BubbleType(str, Enum):
    DIALOGUE = "dialogue"
    THOUGHT = "thought"
    CAPTION = "caption"
    SFX = "sfx"


class ActType(str, Enum):
    """TV act vocabulary. COLD OPEN is folded into TEASER."""
    TEASER = "TEASER"
    ACT_ONE = "ACT ONE"
    ACT_TWO = "ACT TWO"
    ACT_THREE = "ACT THREE"
    ACT_FOUR = "ACT FOUR"
    ACT_FIVE = "ACT FIVE"
    TAG = "TAG"
    EPILOGUE = "EPILOGUE"


@dataclass
class ScriptRef:
    """Span of the original script text a panel was built from."""
    start_offset: int         # Character offset in the original text
    end_offset: int           # Exclusive
    visual_marker: VisualMarker = VisualMarker.STANDARD


@dataclass
class Bubble:
    """A dialogue, thought, caption or sound-effect balloon."""
    type: BubbleType
    text: str
    character: Optional[str] = None
    modifier: Optional[str] = None      # e.g. "V.O.", "whispering", "ON SCREEN"


@dataclass
class ParsedPanel:
    """One panel (comic), shot (screenplay) or beat (stage play)."""
    panel_number: int         # 1-indexed within its page
    description: str
    script_ref: ScriptRef
    aspect_ratio_hint: AspectRatio = AspectRatio.WIDE
    bubbles: list[Bubble] = field(default_factory=list)
    artist_notes: Optional[str] = None
    shot_type: Optional[str] = None     # Camera direction or blocking type
    panel_modifier: Optional[str] = None

    @property
    def visual_marker(self) -> VisualMarker:
        return self.script_ref.visual_marker

    def add_note(self, note: str) -> None:
        """Append a note, keeping earlier notes first."""
        self.artist_notes = f"{self.artist_notes}; {note}" if self.artist_notes else note


@dataclass
class ParsedPage:
    """A comic page, screenplay scene or stage-play scene."""
    page_number: int          # 1-indexed, strictly increasing
    panels: list[ParsedPanel] = field(default_factory=list)
    page_notes: Optional[str] = None
    scene_heading: Optional[str] = None
    location: Optional[str] = None
    time_of_day: Optional[str] = None
    act: Optional[str] = None


@dataclass
class ParsedCharacter:
    """A speaking character; identity is the case-insensitive name."""
    name: str                 # Casing of the first cue seen
    line_count: int = 0
    first_appearance: Optional[str] = None
    description: Optional[str] = None


@dataclass
class ParseWarning:
    """Advisory message. Never blocks result production."""
    message: str
    line: Optional[int] = None          # 1-indexed source line


@dataclass
class ActBreak:
    """A TV act marker attributed to a page."""
    type: ActType
    page_number: int
    line_number: int          # 1-indexed source line
    is_end: bool = False

    @property
    def label(self) -> str:
        return f"END OF {self.type.value}" if self.is_end else self.type.value


@dataclass
class EpisodeMetadata:
    """Episode information found by the TV pre-pass."""
    episode_number: Optional[str] = None
    episode_title: Optional[str] = None
    acts: list[ActBreak] = field(default_factory=list)


@dataclass
class ParsedIssue:
    """Title block of a comic script."""
    title: str
    issue_number: Optional[int] = None
    subtitle: Optional[str] = None
    writer: Optional[str] = None
    page_count: Optional[int] = None
    timeline: Optional[str] = None


@dataclass
class PageText:
    """Text from a single page of a source PDF."""
    page_number: int          # 1-indexed
    text: str
    char_start: int           # Character offset in full text
    char_end: int


@dataclass
class ParseResult:
    """Result of parsing one script."""
    success: bool
    dialect: Dialect
    pages: list[ParsedPage] = field(default_factory=list)
    characters: list[ParsedCharacter] = field(default_factory=list)
    visual_markers: dict[VisualMarker, int] = field(default_factory=dict)
    shot_types: dict[str, int] = field(default_factory=dict)
    errors: list[ParseWarning] = field(default_factory=list)
    metadata: Optional[EpisodeMetadata] = None
    issue: Optional[ParsedIssue] = None

    @property
    def panel_count(self) -> int:
        return sum(len(page.panels) for page in self.pages)

    def to_dict(self) -> dict:
        """Plain JSON-serializable representation."""
        data = asdict(self)
        data["visual_markers"] = {marker.value: count for marker, count in self.visual_markers.items()}
        return data
