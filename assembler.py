"""
Structural assembler: turns classified lines into pages, panels and bubbles.

One pass over the script. Each line is classified against the dialect's
pattern table and handed to the handler for its kind together with the
explicit ParserState, so the whole state machine is visible in one place.
Offsets always refer to the original text.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from character_extractor import CharacterExtractor
from dialects import DialectProfile
from line_classifier import ClassifiedLine, LineKind, classify_line, is_thought_modifier, parse_number_token
from models import (
    Bubble,
    BubbleType,
    ParsedIssue,
    ParsedPage,
    ParsedPanel,
    ParseResult,
    ParseWarning,
    ScriptRef,
    VisualMarker,
)
from visual_markers import classify_visual_marker, detect_aspect_ratio, normalize_shot

ENTRANCE_RE = re.compile(r'\b(?:enters?|entering)\b', re.IGNORECASE)
EXIT_RE = re.compile(r'\b(?:exits?|exiting|exeunt)\b', re.IGNORECASE)
BLOCKING_VERBS = (
    "crosses", "moves", "sits", "stands", "rises", "kneels", "turns", "walks", "runs",
    "falls", "lies", "leans", "paces", "approaches", "retreats", "circles", "freezes",
)
_BLOCKING_RE = re.compile(rf"\b(?:{'|'.join(BLOCKING_VERBS)})\b", re.IGNORECASE)


class AssemblerState(str, Enum):
    NO_PAGE = "no-page"
    IN_PAGE = "in-page"
    IN_PANEL = "in-panel"
    IN_BUBBLE = "in-bubble"


@dataclass
class ParserState:
    """Everything the assembler knows mid-parse."""
    pages: list[ParsedPage] = field(default_factory=list)
    page: Optional[ParsedPage] = None
    panel: Optional[ParsedPanel] = None
    bubble: Optional[Bubble] = None
    bubble_lines: list[str] = field(default_factory=list)
    bubble_indent: int = 0
    marker_written: bool = False        # Open panel has an explicit visual marker
    pending_marker: Optional[VisualMarker] = None
    pending_transition: Optional[str] = None
    section: Optional[str] = None       # "cast" or "notes" while inside one
    current_act: Optional[str] = None
    issue: Optional[ParsedIssue] = None
    line_number: int = 0
    line_start: int = 0
    shot_types: dict[str, int] = field(default_factory=dict)
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def state(self) -> AssemblerState:
        if self.bubble is not None:
            return AssemblerState.IN_BUBBLE
        if self.panel is not None:
            return AssemblerState.IN_PANEL
        if self.page is not None:
            return AssemblerState.IN_PAGE
        return AssemblerState.NO_PAGE

    @property
    def last_page_number(self) -> int:
        return self.pages[-1].page_number if self.pages else 0

    def warn(self, message: str) -> None:
        self.warnings.append(ParseWarning(message, self.line_number))


class StructuralAssembler:
    """
    Builds a ParseResult for one dialect profile.

    Usage:
        result = StructuralAssembler(get_profile("comic")).assemble(text)
    """

    def __init__(self, profile: DialectProfile, extractor: Optional[CharacterExtractor] = None):
        self.profile = profile
        self.extractor = extractor or CharacterExtractor()
        self._handlers = {
            LineKind.BLANK: self._on_blank,
            LineKind.RULE: self._on_ignored,
            LineKind.END_MARKER: self._on_ignored,
            LineKind.EPISODE_MARKER: self._on_ignored,
            LineKind.ISSUE_INFO: self._on_issue_info,
            LineKind.SECTION_HEADER: self._on_section_header,
            LineKind.CAST_ENTRY: self._on_cast_entry,
            LineKind.PAGE_MARKER: self._on_page_marker,
            LineKind.SCENE_HEADING: self._on_scene_heading,
            LineKind.SCENE_MARKER: self._on_scene_marker,
            LineKind.ACT_BREAK: self._on_act_break,
            LineKind.PANEL_MARKER: self._on_panel_marker,
            LineKind.VISUAL_MARKER: self._on_visual_marker,
            LineKind.CHARACTER_CUE: self._on_character_cue,
            LineKind.PARENTHETICAL: self._on_parenthetical,
            LineKind.CAPTION: self._on_caption,
            LineKind.SCREEN_TEXT: self._on_caption,
            LineKind.SFX: self._on_sfx,
            LineKind.ARTIST_NOTE: self._on_artist_note,
            LineKind.TRANSITION: self._on_transition,
            LineKind.TECHNICAL_CUE: self._on_technical_cue,
            LineKind.STAGE_DIRECTION: self._on_stage_direction,
            LineKind.CONTINUATION: self._on_continuation,
        }

    def assemble(self, text: str) -> ParseResult:
        """
        Parse ``text`` into pages, panels and bubbles.

        Returns:
            ParseResult; success is False when no page was produced
        """
        state = ParserState()
        offset = 0
        for raw in text.splitlines(keepends=True):
            state.line_number += 1
            state.line_start = offset
            line = classify_line(raw, self.profile.patterns)
            self._handlers.get(line.kind, self._on_continuation)(state, line)
            offset += len(raw)

        self._close_panel(state, len(text))
        return self._build_result(state)

    def _build_result(self, state: ParserState) -> ParseResult:
        visual_markers: dict[VisualMarker, int] = {}
        for page in state.pages:
            for panel in page.panels:
                visual_markers[panel.visual_marker] = visual_markers.get(panel.visual_marker, 0) + 1

        result = ParseResult(
            success=bool(state.pages),
            dialect=self.profile.dialect,
            pages=state.pages,
            characters=self.extractor.characters(),
            visual_markers=visual_markers,
            shot_types=state.shot_types,
            errors=state.warnings,
            issue=state.issue,
        )
        if not state.pages:
            result.errors.append(ParseWarning(self.profile.empty_message))
        return result

    # ============= STRUCTURE =============

    def _open_page(self, state: ParserState, number: int, **attrs) -> ParsedPage:
        self._close_panel(state, state.line_start)
        page = ParsedPage(page_number=number, act=state.current_act, **attrs)
        state.pages.append(page)
        state.page = page
        state.pending_marker = None
        return page

    def _open_panel(self, state: ParserState, line: ClassifiedLine, number: Optional[int] = None,
                    description: str = "", modifier: Optional[str] = None,
                    shot_type: Optional[str] = None) -> ParsedPanel:
        self._close_panel(state, state.line_start)
        if number is None:
            number = state.page.panels[-1].panel_number + 1 if state.page.panels else 1
        panel = ParsedPanel(
            panel_number=number,
            description=description,
            script_ref=ScriptRef(state.line_start, state.line_start + len(line.text) + line.indent),
            shot_type=shot_type,
            panel_modifier=modifier,
        )
        if modifier:
            marker = classify_visual_marker(modifier)
            if marker != VisualMarker.STANDARD:
                panel.script_ref.visual_marker = marker
                state.marker_written = True
        if state.pending_marker is not None:
            panel.script_ref.visual_marker = state.pending_marker
            state.marker_written = True
            state.pending_marker = None
        if state.pending_transition:
            panel.add_note(state.pending_transition)
            state.pending_transition = None
        if shot_type:
            state.shot_types[shot_type] = state.shot_types.get(shot_type, 0) + 1
        state.page.panels.append(panel)
        state.panel = panel
        return panel

    def _close_panel(self, state: ParserState, end_offset: int) -> None:
        self._close_bubble(state)
        panel = state.panel
        if panel is None:
            return
        panel.description = panel.description.strip()
        if not state.marker_written:
            panel.script_ref.visual_marker = classify_visual_marker(panel.description, panel.panel_modifier or "")
        panel.aspect_ratio_hint = detect_aspect_ratio(panel.description, panel.panel_modifier or "")
        panel.script_ref.end_offset = max(end_offset, panel.script_ref.start_offset)
        state.panel = None
        state.marker_written = False

    def _close_bubble(self, state: ParserState) -> None:
        bubble = state.bubble
        if bubble is None:
            return
        text = " ".join(part for part in state.bubble_lines if part).strip()
        if text and state.panel is not None:
            bubble.text = text
            if bubble.character:
                bubble.character = self.extractor.record(bubble.character, text, state.panel.description)
            state.panel.bubbles.append(bubble)
        state.bubble = None
        state.bubble_lines = []

    def _ensure_panel(self, state: ParserState, line: ClassifiedLine) -> Optional[ParsedPanel]:
        """Open page and panel on demand for dialects without explicit panels."""
        if state.panel is not None:
            return state.panel
        if not self.profile.implicit_structure:
            return None
        if state.page is None:
            self._open_page(state, state.last_page_number + 1)
        return self._open_panel(state, line)

    def _next_number(self, state: ParserState, token: Optional[str], previous: int, what: str) -> int:
        """Explicit number when it increases, otherwise previous + 1 with a warning."""
        explicit = parse_number_token(token) if token else None
        if explicit is not None and explicit > previous:
            return explicit
        default = previous + 1
        if token:
            if explicit is None:
                state.warn(f'Unrecognized {what} number "{token}"; using {default}.')
            else:
                state.warn(f"{what.capitalize()} number {explicit} does not follow {previous}; using {default}.")
        return default

    # ============= HANDLERS =============

    def _on_ignored(self, state: ParserState, line: ClassifiedLine) -> None:
        self._close_bubble(state)

    def _on_blank(self, state: ParserState, line: ClassifiedLine) -> None:
        self._close_bubble(state)
        if state.section == "notes":
            state.section = None

    def _on_issue_info(self, state: ParserState, line: ClassifiedLine) -> None:
        fields = dict(line.fields)
        key = fields.pop("field")
        if state.issue is None:
            state.issue = ParsedIssue(title=fields.pop("title", ""))
        elif key == "title":
            if not state.issue.title:
                state.issue.title = fields["title"]
            return
        for name, value in fields.items():
            setattr(state.issue, name, value)

    def _on_section_header(self, state: ParserState, line: ClassifiedLine) -> None:
        self._close_bubble(state)
        state.section = line.fields["section"]

    def _on_cast_entry(self, state: ParserState, line: ClassifiedLine) -> None:
        if state.section == "cast":
            self.extractor.define(line.fields["name"].strip(), line.fields["description"])
        else:
            self._on_continuation(state, line)

    def _on_page_marker(self, state: ParserState, line: ClassifiedLine) -> None:
        number = self._next_number(state, line.fields.get("token"), state.last_page_number, "page")
        page = self._open_page(state, number)
        if line.fields.get("title"):
            page.page_notes = line.fields["title"]
        state.section = None

    def _on_scene_heading(self, state: ParserState, line: ClassifiedLine) -> None:
        int_ext = line.fields["int_ext"].upper()
        if not int_ext.endswith("."):
            int_ext += "."
        location = line.fields["location"].strip()
        time_of_day = (line.fields.get("time_of_day") or "").strip().upper() or None
        heading = f"{int_ext} {location.upper()}" + (f" - {time_of_day}" if time_of_day else "")

        self._open_page(state, state.last_page_number + 1,
                        scene_heading=heading, location=location, time_of_day=time_of_day)
        if self.profile.page_opens_panel:
            self._open_panel(state, line, description=heading, shot_type="ESTABLISHING")

    def _on_scene_marker(self, state: ParserState, line: ClassifiedLine) -> None:
        self._open_page(state, state.last_page_number + 1, scene_heading=line.fields["label"])

    def _on_act_break(self, state: ParserState, line: ClassifiedLine) -> None:
        self._close_bubble(state)
        # TV acts are attributed to pages by the episode scanner
        if "act" in line.fields:
            return
        state.current_act = str(line.fields["number"])

    def _on_panel_marker(self, state: ParserState, line: ClassifiedLine) -> None:
        if state.page is None:
            if not self.profile.implicit_structure:
                state.warn(f'Panel marker before any page ignored: "{line.text}"')
                return
            self._open_page(state, 1)
        previous = state.page.panels[-1].panel_number if state.page.panels else 0
        number = self._next_number(state, line.fields.get("number"), previous, "panel")
        self._open_panel(state, line, number=number,
                         description=line.fields.get("description", ""),
                         modifier=line.fields.get("modifier"))

    def _on_visual_marker(self, state: ParserState, line: ClassifiedLine) -> None:
        if "shot" in line.fields and self.profile.shot_opens_panel:
            if state.page is None:
                return
            shot = normalize_shot(line.fields["shot"].rstrip(".:"))
            self._open_panel(state, line, description=line.fields.get("subject", ""), shot_type=shot)
            return

        marker = classify_visual_marker(line.fields.get("annotation") or line.fields.get("shot", ""))
        if state.panel is not None:
            self._close_bubble(state)
            # Last annotation wins
            state.panel.script_ref.visual_marker = marker
            state.marker_written = True
        elif state.page is not None:
            state.pending_marker = marker

    def _on_character_cue(self, state: ParserState, line: ClassifiedLine) -> None:
        fields = line.fields
        if (state.bubble is not None and self.profile.dialogue_ends_on == "indent"
                and line.indent > state.bubble_indent):
            # Indented lines inside a balloon are more dialogue, even "Word: text"
            self._on_continuation(state, line)
            return
        if self._ensure_panel(state, line) is None:
            return
        self._close_bubble(state)
        modifier = fields.get("modifier")
        state.bubble = Bubble(
            type=BubbleType.THOUGHT if is_thought_modifier(modifier) else BubbleType.DIALOGUE,
            text="",
            character=fields["name"],
            modifier=modifier,
        )
        state.bubble_lines = [fields["text"]] if fields.get("text") else []
        state.bubble_indent = line.indent

    def _on_parenthetical(self, state: ParserState, line: ClassifiedLine) -> None:
        if state.bubble is None:
            self._on_continuation(state, line)
            return
        text = line.fields["text"].strip()
        bubble = state.bubble
        bubble.modifier = f"{bubble.modifier}, {text}" if bubble.modifier else text

    def _on_caption(self, state: ParserState, line: ClassifiedLine) -> None:
        if self._ensure_panel(state, line) is None:
            return
        self._close_bubble(state)
        modifier = line.fields.get("modifier")
        if line.kind == LineKind.SCREEN_TEXT:
            modifier = " ".join(modifier.upper().split())
        state.panel.bubbles.append(Bubble(BubbleType.CAPTION, _strip_quotes(line.fields["text"]), modifier=modifier))

    def _on_sfx(self, state: ParserState, line: ClassifiedLine) -> None:
        if self._ensure_panel(state, line) is None:
            return
        self._close_bubble(state)
        text = _strip_quotes(line.fields["text"])
        if self.profile.sfx_as_note:
            state.panel.add_note(f"SFX: {text}")
        else:
            state.panel.bubbles.append(Bubble(BubbleType.SFX, text))

    def _on_artist_note(self, state: ParserState, line: ClassifiedLine) -> None:
        note = line.fields["note"].strip()
        if state.panel is not None:
            state.panel.add_note(note)
        elif state.page is not None:
            _add_page_note(state.page, note)

    def _on_transition(self, state: ParserState, line: ClassifiedLine) -> None:
        self._close_bubble(state)
        # Attached to whichever panel opens next
        state.pending_transition = line.fields["transition"].upper()

    def _on_technical_cue(self, state: ParserState, line: ClassifiedLine) -> None:
        panel = self._ensure_panel(state, line)
        if panel is None:
            return
        self._close_bubble(state)
        panel.add_note(line.fields["cue"])

    def _on_stage_direction(self, state: ParserState, line: ClassifiedLine) -> None:
        direction = line.fields["direction"]
        rest = line.fields.get("rest")

        beat = None
        if ENTRANCE_RE.search(direction):
            beat = "ENTRANCE"
        elif EXIT_RE.search(direction):
            beat = "EXIT"
        elif not rest and _BLOCKING_RE.search(direction):
            beat = "BLOCKING"

        if beat:
            if state.page is None:
                self._open_page(state, state.last_page_number + 1)
            self._open_panel(state, line, description=direction, shot_type=beat)
        elif state.bubble is not None and not rest:
            bubble = state.bubble
            bubble.modifier = f"{bubble.modifier}, {direction}" if bubble.modifier else direction
            return
        else:
            panel = self._ensure_panel(state, line)
            if panel is None:
                return
            self._close_bubble(state)
            panel.description = f"{panel.description} {direction}".strip()

        if rest:
            inner = classify_line(rest, self.profile.patterns)
            if inner.kind == LineKind.CHARACTER_CUE:
                self._on_character_cue(state, inner)
            else:
                state.panel.description = f"{state.panel.description} {rest}".strip()

    def _on_continuation(self, state: ParserState, line: ClassifiedLine) -> None:
        text = re.sub(r'^>\s*', '', line.text)
        if state.bubble is not None:
            if self.profile.dialogue_ends_on == "blank" or line.indent > state.bubble_indent:
                state.bubble_lines.append(text)
                return
            self._close_bubble(state)

        if state.panel is None and state.page is not None and state.section == "notes":
            _add_page_note(state.page, text)
            return
        if state.section == "cast" and state.panel is None:
            return

        panel = self._ensure_panel(state, line)
        if panel is None:
            return
        panel.description = f"{panel.description} {text}".strip()


def _strip_quotes(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] in "\"“" and text[-1] in "\"”":
        return text[1:-1].strip()
    return text


def _add_page_note(page: ParsedPage, note: str) -> None:
    page.page_notes = f"{page.page_notes}\n{note}" if page.page_notes else note
