"""
TV pre-pass: episode number, title and act breaks.

Runs over the raw text independently of the assembler. Act breaks are
attributed to pages by counting scene headings, so the page numbers line
up with the pages the screenplay assembler produces.
"""
import copy
import re

from dialects import ACT_PATTERNS, EPISODE_PATTERNS, SCENE_HEADING_RE
from line_classifier import LineKind, LinePattern, classify_line
from models import ActBreak, EpisodeMetadata, ParsedPage, ParseWarning

SCAN_PATTERNS = EPISODE_PATTERNS + ACT_PATTERNS + (LinePattern(LineKind.SCENE_HEADING, SCENE_HEADING_RE),)

# A line that is nothing but a quoted title, optionally labelled
TITLE_LINE_RE = re.compile(r'^(?:TITLE\s*:\s*)?(?:["“](?P<double>[^"”]+)["”]|\'(?P<single>[^\']+)\')$', re.IGNORECASE)


def extract_episode_metadata(text: str) -> EpisodeMetadata:
    """
    Scan a TV script for episode information.

    The first episode marker wins. A title may sit on the marker line or on
    its own quoted line anywhere before the first scene heading. Act breaks
    seen before any scene heading are attributed to page 1.

    Args:
        text: Full script text

    Returns:
        EpisodeMetadata with acts in source order
    """
    metadata = EpisodeMetadata()
    scenes = 0

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = classify_line(raw, SCAN_PATTERNS)

        if line.kind == LineKind.SCENE_HEADING:
            scenes += 1
        elif line.kind == LineKind.EPISODE_MARKER:
            if metadata.episode_number is None:
                metadata.episode_number = line.fields["episode"]
                if line.fields.get("title") and metadata.episode_title is None:
                    metadata.episode_title = line.fields["title"]
        elif line.kind == LineKind.ACT_BREAK:
            metadata.acts.append(ActBreak(
                type=line.fields["act"],
                page_number=max(scenes, 1),
                line_number=line_number,
                is_end=line.fields["is_end"],
            ))
        elif metadata.episode_title is None and scenes == 0 and line.text:
            match = TITLE_LINE_RE.match(line.text)
            if match:
                metadata.episode_title = (match.group("double") or match.group("single")).strip() or None

    return metadata


def inject_act_breaks(pages: list[ParsedPage], acts: list[ActBreak]) -> tuple[list[ParsedPage], list[ParseWarning]]:
    """
    Record act breaks on the first panel of the page they belong to.

    Labels for one page are comma-joined and placed ahead of any existing
    note. The input pages are left untouched.

    Returns:
        Tuple of (new pages, warnings for breaks that found no panel)
    """
    pages = copy.deepcopy(pages)
    by_number = {page.page_number: page for page in pages}
    warnings = []

    grouped: dict[int, list[ActBreak]] = {}
    for act in acts:
        grouped.setdefault(act.page_number, []).append(act)

    for page_number, page_acts in grouped.items():
        page = by_number.get(page_number)
        if page is None or not page.panels:
            for act in page_acts:
                warnings.append(ParseWarning(
                    f'Unattributed act break "{act.label}": page {page_number} has no panels.',
                    act.line_number,
                ))
            continue

        panel = page.panels[0]
        labels = ", ".join(act.label for act in page_acts)
        panel.artist_notes = f"{labels}; {panel.artist_notes}" if panel.artist_notes else labels

    return pages, warnings
