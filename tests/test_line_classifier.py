import pytest

from dialects import COMIC_PATTERNS, SCREENPLAY_PATTERNS, STAGE_PLAY_PATTERNS, TV_PATTERNS
from line_classifier import LineKind, classify_line, number_to_word, parse_number_token
from models import ActType


@pytest.mark.parametrize(
    "token, expected",
    [
        ("3", 3),
        ("ONE", 1),
        ("twenty-one", 21),
        ("TWENTY ONE", 21),
        ("Forty", 40),
        ("X", None),
        ("IV", None),
        (None, None),
    ],
)
def test_parse_number_token(token, expected):
    assert parse_number_token(token) == expected


def test_parse_number_token_roman_only_when_allowed():
    assert parse_number_token("IV", allow_roman=True) == 4
    assert parse_number_token("iii", allow_roman=True) == 3


def test_number_to_word():
    assert number_to_word(5) == "FIVE"
    assert number_to_word(21) == "TWENTY-ONE"
    assert number_to_word(40) == "FORTY"


@pytest.mark.parametrize(
    "line, kind",
    [
        ("PAGE 1", LineKind.PAGE_MARKER),
        ("### PAGE ONE (5 Panels)", LineKind.PAGE_MARKER),
        ("**PAGE 2**", LineKind.PAGE_MARKER),
        ("# PAGE 1", LineKind.PAGE_MARKER),
        ("PAGE 2: The rooftop", LineKind.PAGE_MARKER),
        ("# Night Shift", LineKind.ISSUE_INFO),
        ("Panel 1", LineKind.PANEL_MARKER),
        ("**Panel 3**", LineKind.PANEL_MARKER),
        ("CAPTION: Meanwhile...", LineKind.CAPTION),
        ("SFX: BOOM", LineKind.SFX),
        ("ON SCREEN: Access denied", LineKind.SCREEN_TEXT),
        ("SHOT: split", LineKind.VISUAL_MARKER),
        ("SPLASH PAGE", LineKind.VISUAL_MARKER),
        ("(Keep the lighting cold)", LineKind.ARTIST_NOTE),
        ("---", LineKind.RULE),
        ("ALICE: Hello there", LineKind.CHARACTER_CUE),
        ("Alice: Hello there", LineKind.CHARACTER_CUE),
        ("ALICE", LineKind.CHARACTER_CUE),
        ("The city at night.", LineKind.CONTINUATION),
        ("   ", LineKind.BLANK),
    ],
)
def test_comic_line_kinds(line, kind):
    assert classify_line(line, COMIC_PATTERNS).kind == kind


def test_page_marker_keeps_number_token():
    assert classify_line("### PAGE ONE (5 Panels)", COMIC_PATTERNS).fields["token"] == "ONE"
    assert classify_line("PAGE X", COMIC_PATTERNS).fields["token"] == "X"
    assert classify_line("PAGE", COMIC_PATTERNS).fields == {}


def test_page_marker_trailing_title():
    assert classify_line("PAGE 2: The rooftop", COMIC_PATTERNS).fields == {"token": "2", "title": "The rooftop"}
    assert classify_line("PAGE 3 - Night", COMIC_PATTERNS).fields == {"token": "3", "title": "Night"}
    assert classify_line("PAGE 4.", COMIC_PATTERNS).fields == {"token": "4"}
    assert classify_line("PG-13 rating", COMIC_PATTERNS).kind != LineKind.PAGE_MARKER


def test_panel_marker_fields():
    line = classify_line("**Panel 2** (Split Panel)", COMIC_PATTERNS)
    assert line.fields["number"] == "2"
    assert line.fields["modifier"] == "Split Panel"

    line = classify_line("PANEL 4: Alice walks in", COMIC_PATTERNS)
    assert line.fields == {"number": "4", "description": "Alice walks in"}


def test_cue_fields_and_indent():
    line = classify_line("  ALICE (thought): Hmm", COMIC_PATTERNS)
    assert line.kind == LineKind.CHARACTER_CUE
    assert line.indent == 2
    assert line.fields == {"name": "ALICE", "modifier": "thought", "text": "Hmm"}


def test_tab_indent_counts_four():
    assert classify_line("\tmore words", COMIC_PATTERNS).indent == 4


def test_reserved_words_are_not_cues():
    assert classify_line("CAPTION", COMIC_PATTERNS).kind != LineKind.CHARACTER_CUE
    assert classify_line("CUT TO", SCREENPLAY_PATTERNS).kind == LineKind.TRANSITION


def test_screenplay_lines():
    heading = classify_line("INT. KITCHEN - NIGHT", SCREENPLAY_PATTERNS)
    assert heading.kind == LineKind.SCENE_HEADING
    assert heading.fields["int_ext"] == "INT."
    assert heading.fields["location"] == "KITCHEN"
    assert heading.fields["time_of_day"] == "NIGHT"

    assert classify_line("CUT TO:", SCREENPLAY_PATTERNS).fields == {"transition": "CUT TO"}

    shot = classify_line("CLOSE UP - THE POT", SCREENPLAY_PATTERNS)
    assert shot.kind == LineKind.VISUAL_MARKER
    assert shot.fields == {"shot": "CLOSE UP", "subject": "THE POT"}

    cue = classify_line("JOHN (V.O.)", SCREENPLAY_PATTERNS)
    assert cue.kind == LineKind.CHARACTER_CUE
    assert cue.fields == {"name": "JOHN", "modifier": "V.O."}

    assert classify_line("(beat)", SCREENPLAY_PATTERNS).kind == LineKind.PARENTHETICAL


def test_tv_lines():
    episode = classify_line("EPISODE 1x03", TV_PATTERNS)
    assert episode.kind == LineKind.EPISODE_MARKER
    assert episode.fields["episode"] == "1x03"

    assert classify_line('EPISODE 103: "Pilot"', TV_PATTERNS).fields == {"episode": "103", "title": "Pilot"}
    assert classify_line("ACT ONE", TV_PATTERNS).fields == {"act": ActType.ACT_ONE, "is_end": False}
    assert classify_line("END OF ACT TWO", TV_PATTERNS).fields == {"act": ActType.ACT_TWO, "is_end": True}
    assert classify_line("COLD OPEN", TV_PATTERNS).fields["act"] == ActType.TEASER
    assert classify_line("ACT III", TV_PATTERNS).fields["act"] == ActType.ACT_THREE


def test_stage_play_lines():
    scene = classify_line("SCENE 2: A garden", STAGE_PLAY_PATTERNS)
    assert scene.kind == LineKind.SCENE_MARKER
    assert scene.fields == {"number": 2, "label": "SCENE 2: A garden"}

    act = classify_line("ACT II", STAGE_PLAY_PATTERNS)
    assert act.kind == LineKind.ACT_BREAK
    assert act.fields["number"] == 2

    direction = classify_line("(She enters.) HAMLET: Hi", STAGE_PLAY_PATTERNS)
    assert direction.kind == LineKind.STAGE_DIRECTION
    assert direction.fields == {"direction": "She enters.", "rest": "HAMLET: Hi"}

    assert classify_line("HAMLET: To be.", STAGE_PLAY_PATTERNS).kind == LineKind.CHARACTER_CUE
    assert classify_line("LIGHTS: Fade to blue", STAGE_PLAY_PATTERNS).kind == LineKind.TECHNICAL_CUE
    assert classify_line("END OF ACT ONE", STAGE_PLAY_PATTERNS).kind == LineKind.END_MARKER
