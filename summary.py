"""
Human-readable summaries of parse results.
"""
from pathlib import Path

from models import Dialect, ParseResult, VisualMarker

MAX_SUMMARY_CHARACTERS = 10


def get_script_summary(result: ParseResult) -> str:
    """
    Summarize a parse result for display.

    Layout follows the dialect: comics count pages and panels, screenplays
    and TV scripts count scenes and shots, stage plays count scenes and beats.
    """
    lines = []

    if result.issue:
        issue = result.issue
        title = issue.title or "Untitled"
        if issue.issue_number is not None:
            title += f" #{issue.issue_number}"
        if issue.subtitle:
            title += f": {issue.subtitle}"
        lines.append(f"Issue: {title}")
        if issue.writer:
            lines.append(f"Writer: {issue.writer}")
        if issue.timeline:
            lines.append(f"Timeline: {issue.timeline}")

    if result.metadata:
        metadata = result.metadata
        if metadata.episode_number:
            lines.append(f"Episode: {metadata.episode_number}")
        if metadata.episode_title:
            lines.append(f'Title: "{metadata.episode_title}"')
        if metadata.acts:
            lines.append("Act Structure:")
            for act in metadata.acts:
                lines.append(f"  - {act.label} (page {act.page_number})")

    if result.dialect == Dialect.COMIC:
        lines.append(f"Pages: {len(result.pages)}")
        lines.append(f"Panels: {result.panel_count}")
    elif result.dialect == Dialect.STAGE_PLAY:
        lines.append(f"Scenes: {len(result.pages)}")
        lines.append(f"Total Beats: {result.panel_count}")
    else:
        lines.append(f"Scenes: {len(result.pages)}")
        lines.append(f"Total Shots: {result.panel_count}")

    lines.append(f"Characters: {len(result.characters)}")
    if result.characters:
        lines.append("Main Characters:")
        ranked = sorted(result.characters, key=lambda c: c.line_count, reverse=True)
        for character in ranked[:MAX_SUMMARY_CHARACTERS]:
            lines.append(f"  - {character.name} ({character.line_count} lines)")
        if len(ranked) > MAX_SUMMARY_CHARACTERS:
            lines.append(f"  ... and {len(ranked) - MAX_SUMMARY_CHARACTERS} more")

    if result.shot_types:
        lines.append("Blocking:" if result.dialect == Dialect.STAGE_PLAY else "Shot Types:")
        for shot, count in sorted(result.shot_types.items(), key=lambda item: (-item[1], item[0])):
            lines.append(f"  - {shot}: {count}")

    markers = {m: n for m, n in result.visual_markers.items() if m != VisualMarker.STANDARD and n}
    if markers:
        lines.append("Visual Markers:")
        for marker, count in markers.items():
            lines.append(f"  - {marker.value}: {count}")

    if result.errors:
        lines.append("Notes:")
        for warning in result.errors:
            where = f" (line {warning.line})" if warning.line else ""
            lines.append(f"  - {warning.message}{where}")

    return "\n".join(lines)


def write_summary(result: ParseResult, output_dir: str, source: str) -> str:
    """
    Write a human-readable summary file.

    Args:
        result: ParseResult from parse_script()
        output_dir: Directory for output
        source: Original script path

    Returns:
        Path to summary file
    """
    summary_path = Path(output_dir) / "parse_summary.txt"

    lines = [
        "Script Parse Summary",
        "=" * 50,
        f"Source: {source}",
        f"Dialect: {result.dialect.value}",
        f"Success: {result.success}",
        "",
        get_script_summary(result),
        "",
        "Pages:",
        "-" * 50,
    ]

    for page in result.pages:
        heading = f" - {page.scene_heading}" if page.scene_heading else ""
        lines.append(f"\nPage {page.page_number}{heading} ({len(page.panels)} panels)")
        for panel in page.panels[:5]:  # Show first 5 panels
            description = panel.description[:60] + "..." if len(panel.description) > 60 else panel.description
            lines.append(f"    {panel.panel_number}. {description}")
        if len(page.panels) > 5:
            lines.append(f"    ... and {len(page.panels) - 5} more")

    with open(summary_path, 'w', encoding='utf-8') as f:
        f.write('\n'.join(lines))

    return str(summary_path)
