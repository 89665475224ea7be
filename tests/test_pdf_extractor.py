import fitz
import pytest

from pdf_extractor import extract_text_with_pages, load_script_text
from script_parser import parse_script


def _make_pdf(path, page_texts):
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        page.insert_text((72, 72), text, fontsize=11)
    doc.save(str(path))
    doc.close()


def test_extract_text_tracks_page_boundaries(tmp_path):
    pdf_path = tmp_path / "script.pdf"
    _make_pdf(pdf_path, ["PAGE 1\nPanel 1\nALICE: Hello", "PAGE 2\nPanel 1\nBOB: Hi"])

    text, pages = extract_text_with_pages(str(pdf_path))

    assert [p.page_number for p in pages] == [1, 2]
    assert pages[0].char_start == 0
    assert pages[0].char_end == pages[1].char_start
    assert pages[1].char_end == len(text)
    assert "ALICE: Hello" in pages[0].text
    assert "BOB: Hi" in pages[1].text


def test_pdf_script_parses(tmp_path):
    pdf_path = tmp_path / "script.pdf"
    _make_pdf(pdf_path, ["PAGE 1\nPanel 1\nALICE: Hello"])

    text, _ = load_script_text(str(pdf_path))
    result = parse_script(text)

    assert result.success
    assert [c.name for c in result.characters] == ["ALICE"]


def test_load_plain_text(tmp_path):
    script = tmp_path / "script.fountain"
    script.write_text("INT. ROOM - DAY\nA room.\n", encoding="utf-8")

    text, pages = load_script_text(str(script))

    assert text == "INT. ROOM - DAY\nA room.\n"
    assert len(pages) == 1
    assert (pages[0].char_start, pages[0].char_end) == (0, len(text))


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_script_text(str(tmp_path / "missing.txt"))


def test_load_unsupported_type(tmp_path):
    path = tmp_path / "script.docx"
    path.write_bytes(b"not a script")
    with pytest.raises(ValueError):
        load_script_text(str(path))
