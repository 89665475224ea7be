"""
Script loading: PDF text extraction with page boundary tracking, or plain text.
"""
from pathlib import Path

import fitz  # PyMuPDF
from models import PageText

TEXT_SUFFIXES = (".txt", ".md", ".markdown", ".fountain")


def extract_text_with_pages(pdf_path: str) -> tuple[str, list[PageText]]:
    """
    Extract text from PDF while tracking page boundaries.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        Tuple of (full_text, list of PageText objects)
    """
    doc = fitz.open(pdf_path)
    pages: list[PageText] = []
    full_text_parts = []
    char_offset = 0

    for page_num in range(len(doc)):
        page = doc[page_num]
        text = page.get_text("text")

        # Ensure text ends with newline for clean concatenation
        if text and not text.endswith('\n'):
            text += '\n'

        pages.append(PageText(
            page_number=page_num + 1,  # 1-indexed
            text=text,
            char_start=char_offset,
            char_end=char_offset + len(text)
        ))

        full_text_parts.append(text)
        char_offset += len(text)

    doc.close()
    return ''.join(full_text_parts), pages


def load_script_text(path: str) -> tuple[str, list[PageText]]:
    """
    Load a script from disk.

    PDFs go through PyMuPDF; .txt, .md and .fountain files are read as UTF-8
    and reported as a single source page.

    Raises:
        FileNotFoundError: If the path does not exist
        ValueError: If the file type is not supported
    """
    script_path = Path(path)
    if not script_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = script_path.suffix.lower()
    if suffix == ".pdf":
        return extract_text_with_pages(str(script_path))
    if suffix not in TEXT_SUFFIXES:
        raise ValueError(f"Unsupported script file type: {suffix or script_path.name}")

    text = script_path.read_text(encoding="utf-8")
    return text, [PageText(page_number=1, text=text, char_start=0, char_end=len(text))]
