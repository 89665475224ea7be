"""
Keeps script text and parsed panels in step: offset lookup for
highlighting and a diff between two parses of an edited script.
"""
from dataclasses import dataclass
from typing import Literal, Optional

from models import ParsedPage, ParsedPanel, ParseResult, PageText

ChangeKind = Literal["added", "removed", "modified"]


@dataclass
class PanelDiff:
    """One panel-level change between two parses."""
    kind: ChangeKind
    page_number: int
    panel_number: int
    old_description: Optional[str] = None
    new_description: Optional[str] = None


def find_panel_at_offset(result: ParseResult, offset: int) -> Optional[tuple[ParsedPage, ParsedPanel]]:
    """
    Find the panel whose script span contains a character offset.

    Args:
        result: ParseResult to search
        offset: Character position in the original script text

    Returns:
        Tuple of (page, panel), or None when the offset is outside every panel
    """
    for page in result.pages:
        for panel in page.panels:
            ref = panel.script_ref
            if ref.start_offset <= offset < ref.end_offset:
                return page, panel
    return None


def panel_script_text(text: str, panel: ParsedPanel) -> str:
    """The slice of the original script a panel was built from."""
    return text[panel.script_ref.start_offset:panel.script_ref.end_offset]


def get_source_page_for_panel(pages: list[PageText], panel: ParsedPanel) -> int:
    """
    Source PDF page a panel starts on.

    Args:
        pages: Page boundaries from extract_text_with_pages()
        panel: Parsed panel

    Returns:
        Page number (1-indexed)
    """
    for page in pages:
        if page.char_start <= panel.script_ref.start_offset < page.char_end:
            return page.page_number
    # If past end, return last page
    return pages[-1].page_number if pages else 1


def diff_results(old: ParseResult, new: ParseResult) -> list[PanelDiff]:
    """
    Compare two parses of the same script, panel by panel.

    Panels are matched by (page number, panel number). A matched panel whose
    description changed is reported as modified.

    Returns:
        Changes sorted by page, then panel
    """
    old_panels = _index_panels(old)
    new_panels = _index_panels(new)
    changes = []

    for key, panel in new_panels.items():
        previous = old_panels.get(key)
        if previous is None:
            changes.append(PanelDiff("added", key[0], key[1], new_description=panel.description))
        elif previous.description != panel.description:
            changes.append(PanelDiff("modified", key[0], key[1],
                                     old_description=previous.description,
                                     new_description=panel.description))

    for key, panel in old_panels.items():
        if key not in new_panels:
            changes.append(PanelDiff("removed", key[0], key[1], old_description=panel.description))

    changes.sort(key=lambda c: (c.page_number, c.panel_number))
    return changes


def _index_panels(result: ParseResult) -> dict[tuple[int, int], ParsedPanel]:
    return {
        (page.page_number, panel.panel_number): panel
        for page in result.pages
        for panel in page.panels
    }
