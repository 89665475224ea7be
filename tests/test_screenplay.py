from models import BubbleType
from script_parser import parse_script

SCREENPLAY = """FADE IN:

INT. KITCHEN - NIGHT

Alice stirs a pot.

ALICE
Where is everyone?

CLOSE UP - THE POT
It boils over.

SFX: Hissing steam

BOB (O.S.)
(shouting)
Coming!

CUT TO:

EXT. GARDEN - DAY

Birds sing.
"""


def test_scene_headings_become_pages():
    result = parse_script(SCREENPLAY, "screenplay")

    assert result.success
    assert [p.page_number for p in result.pages] == [1, 2]
    first, second = result.pages
    assert first.scene_heading == "INT. KITCHEN - NIGHT"
    assert (first.location, first.time_of_day) == ("KITCHEN", "NIGHT")
    assert second.scene_heading == "EXT. GARDEN - DAY"


def test_establishing_and_shot_panels():
    result = parse_script(SCREENPLAY, "screenplay")
    panels = result.pages[0].panels

    assert [p.shot_type for p in panels] == ["ESTABLISHING", "CLOSE UP"]
    assert panels[0].description.endswith("Alice stirs a pot.")
    assert panels[1].description == "THE POT It boils over."
    assert result.shot_types == {"ESTABLISHING": 2, "CLOSE UP": 1}


def test_transitions_and_sfx_become_notes():
    result = parse_script(SCREENPLAY, "screenplay")

    assert result.pages[0].panels[0].artist_notes == "FADE IN"
    assert result.pages[0].panels[1].artist_notes == "SFX: Hissing steam"
    assert result.pages[1].panels[0].artist_notes == "CUT TO"


def test_dialogue_runs_until_blank_line():
    result = parse_script(SCREENPLAY, "screenplay")
    alice = result.pages[0].panels[0].bubbles[0]
    bob = result.pages[0].panels[1].bubbles[0]

    assert (alice.character, alice.text) == ("ALICE", "Where is everyone?")
    assert (bob.character, bob.text, bob.modifier) == ("BOB", "Coming!", "O.S., shouting")
    assert [c.name for c in result.characters] == ["ALICE", "BOB"]


def test_voice_over_is_a_thought_bubble():
    text = "INT. CAR - NIGHT\n\nJOHN (V.O.)\nI should never have come back.\n"
    bubble = parse_script(text, "screenplay").pages[0].panels[0].bubbles[0]

    assert bubble.type == BubbleType.THOUGHT
    assert bubble.modifier == "V.O."


def test_content_before_first_scene_is_ignored():
    result = parse_script("ALICE\nHello\n\nINT. ROOM - DAY\n", "screenplay")

    assert len(result.pages) == 1
    assert result.characters == []


def test_no_scene_headings_is_unsuccessful():
    result = parse_script("Just some prose.\n", "screenplay")

    assert not result.success
    assert "No scenes detected" in result.errors[0].message
