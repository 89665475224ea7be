from episode_scanner import extract_episode_metadata, inject_act_breaks
from models import ActBreak, ActType, ParsedPage, ParsedPanel, ScriptRef
from script_parser import parse_script

EPISODE = """EPISODE 1x03 "The Return"
TEASER
INT. LAB - NIGHT
ALICE
Hello.

END OF TEASER

ACT ONE
EXT. STREET - DAY
Cars pass.
"""


def test_act_break_lands_on_first_panel():
    result = parse_script("EPISODE 103\nACT ONE\nINT. X - DAY\n", "tv-series")

    assert result.success
    assert result.metadata.episode_number == "103"
    assert [(a.type, a.page_number) for a in result.metadata.acts] == [(ActType.ACT_ONE, 1)]
    assert result.pages[0].panels[0].artist_notes == "ACT ONE"
    assert result.errors == []


def test_episode_metadata_with_season_numbering():
    metadata = extract_episode_metadata(EPISODE)

    assert metadata.episode_number == "1x03"
    assert metadata.episode_title == "The Return"
    assert [(a.label, a.page_number, a.line_number) for a in metadata.acts] == [
        ("TEASER", 1, 2),
        ("END OF TEASER", 1, 7),
        ("ACT ONE", 1, 9),
    ]


def test_acts_injected_per_page():
    result = parse_script(EPISODE, "tv-series")

    # Breaks are attributed to the page active when they occur
    assert result.pages[0].panels[0].artist_notes == "TEASER, END OF TEASER, ACT ONE"
    assert result.pages[1].panels[0].artist_notes is None
    assert result.pages[0].panels[0].bubbles[0].text == "Hello."


def test_quoted_title_line_before_first_scene():
    metadata = extract_episode_metadata('EPISODE 5\n"Pilot"\nINT. ROOM - DAY\n"Not a title"\n')

    assert metadata.episode_number == "5"
    assert metadata.episode_title == "Pilot"


def test_first_episode_marker_wins():
    metadata = extract_episode_metadata("EPISODE 2\nEPISODE 9\nINT. ROOM - DAY\n")

    assert metadata.episode_number == "2"


def test_missing_episode_and_acts_produce_warnings():
    result = parse_script("INT. ROOM - DAY\nA room.\n", "tv-series")
    messages = [w.message for w in result.errors]

    assert result.success
    assert any(m.startswith("No episode number detected") for m in messages)
    assert any(m.startswith("No act breaks detected") for m in messages)


def _page(number, panels=1, notes=None):
    return ParsedPage(
        page_number=number,
        panels=[ParsedPanel(i + 1, "", ScriptRef(0, 0), artist_notes=notes) for i in range(panels)],
    )


def test_inject_prepends_to_existing_note_without_mutating_input():
    pages = [_page(1, notes="existing")]
    acts = [ActBreak(ActType.ACT_ONE, page_number=1, line_number=3)]

    injected, warnings = inject_act_breaks(pages, acts)

    assert injected[0].panels[0].artist_notes == "ACT ONE; existing"
    assert pages[0].panels[0].artist_notes == "existing"
    assert warnings == []


def test_inject_warns_for_unattributed_breaks():
    pages = [_page(1), _page(2, panels=0)]
    acts = [
        ActBreak(ActType.ACT_TWO, page_number=2, line_number=10),
        ActBreak(ActType.TAG, page_number=5, line_number=20, is_end=True),
    ]

    injected, warnings = inject_act_breaks(pages, acts)

    assert injected[0].panels[0].artist_notes is None
    assert len(warnings) == 2
    assert all("Unattributed act break" in w.message for w in warnings)
    assert [w.line for w in warnings] == [10, 20]
