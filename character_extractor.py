"""
Accumulates the characters that speak in a script.
"""
from typing import Optional

from models import ParsedCharacter

DEFAULT_EXCERPT_LENGTH = 80


def _excerpt(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit - 3].rstrip() + "..."


class CharacterExtractor:
    """
    Case-insensitive character registry.

    Keyed by the lower-cased cue name; the first cue seen fixes the
    canonical casing. Output order is first-seen order, so two runs over
    the same script produce identical lists.
    """

    def __init__(self, excerpt_length: int = DEFAULT_EXCERPT_LENGTH):
        self.excerpt_length = excerpt_length
        self._characters: dict[str, ParsedCharacter] = {}

    def record(self, cue_name: str, line_text: str = "", page_context: str = "") -> str:
        """
        Count one line of dialogue for ``cue_name``.

        Args:
            cue_name: Character name as written in the cue
            line_text: The dialogue line itself
            page_context: Surrounding text, usually the panel description

        Returns:
            The canonical (first-seen) spelling of the name
        """
        key = cue_name.strip().lower()
        character = self._characters.get(key)
        if character is None:
            character = ParsedCharacter(name=cue_name.strip())
            self._characters[key] = character
        if character.line_count == 0 and character.first_appearance is None:
            context = page_context.strip() or line_text.strip()
            character.first_appearance = _excerpt(context, self.excerpt_length) if context else "1 line"
        character.line_count += 1
        return character.name

    def define(self, name: str, description: str) -> str:
        """Register a cast-list entry without counting a line."""
        key = name.strip().lower()
        character = self._characters.get(key)
        if character is None:
            character = ParsedCharacter(name=name.strip())
            self._characters[key] = character
        character.description = description.strip() or None
        return character.name

    def get(self, name: str) -> Optional[ParsedCharacter]:
        return self._characters.get(name.strip().lower())

    def characters(self) -> list[ParsedCharacter]:
        """Characters with lines or a description, in first-seen order."""
        return [
            ParsedCharacter(
                name=c.name,
                line_count=c.line_count,
                first_appearance=c.first_appearance,
                description=c.description,
            )
            for c in self._characters.values()
            if c.line_count > 0 or c.description
        ]
