"""
Entry point: parse a script in any supported dialect.
"""
import logging
from typing import Union

from assembler import StructuralAssembler
from dialects import get_profile
from episode_scanner import extract_episode_metadata, inject_act_breaks
from models import Dialect, ParseResult, ParseWarning

logger = logging.getLogger(__name__)

DIALECT_LABELS = {
    Dialect.COMIC: "Comic",
    Dialect.SCREENPLAY: "Screenplay",
    Dialect.STAGE_PLAY: "Stage play",
    Dialect.TV_SERIES: "TV script",
}


def parse_script(text: str, dialect: Union[Dialect, str] = Dialect.COMIC) -> ParseResult:
    """
    Parse script text into pages, panels, bubbles and characters.

    Never raises: unknown dialects and internal failures come back as an
    unsuccessful result carrying a warning.

    Args:
        text: Full script text
        dialect: Dialect or its string value ("comic", "screenplay",
            "stage-play", "tv-series")

    Returns:
        ParseResult
    """
    try:
        dialect = Dialect(dialect)
    except ValueError:
        logger.warning("Unknown script dialect: %r", dialect)
        return ParseResult(
            success=False,
            dialect=Dialect.COMIC,
            errors=[ParseWarning(f'Unknown dialect "{dialect}". Expected one of: '
                                 f'{", ".join(d.value for d in Dialect)}.')],
        )

    try:
        result = StructuralAssembler(get_profile(dialect)).assemble(text)
        if dialect == Dialect.TV_SERIES:
            _apply_episode_metadata(result, text)
    except Exception as e:
        logger.exception("Failed to parse %s script", dialect.value)
        return ParseResult(
            success=False,
            dialect=dialect,
            errors=[ParseWarning(f"{DIALECT_LABELS[dialect]} parser exception: {e}")],
        )

    logger.debug(
        "Parsed %s script: %d pages, %d panels, %d characters, %d warnings",
        dialect.value, len(result.pages), result.panel_count, len(result.characters), len(result.errors),
    )
    return result


def _apply_episode_metadata(result: ParseResult, text: str) -> None:
    metadata = extract_episode_metadata(text)
    result.metadata = metadata
    if not result.pages:
        return

    result.pages, warnings = inject_act_breaks(result.pages, metadata.acts)
    result.errors.extend(warnings)
    if metadata.episode_number is None:
        result.errors.append(ParseWarning(
            'No episode number detected. Consider adding "EPISODE 103" or similar at the beginning.'))
    if not metadata.acts:
        result.errors.append(ParseWarning(
            'No act breaks detected. TV scripts typically include "TEASER", "ACT ONE", etc.'))
