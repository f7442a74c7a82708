import pytest

from chataide.models import Tone
from chataide.tone import classify_tone, has_emojis


def test_party_scenario_is_enthusiastic_with_emojis():
    assert classify_tone("omg!! can't believe it!! 🎉") == (Tone.ENTHUSIASTIC, True)


@pytest.mark.parametrize(
    "text, tone",
    [
        ("that is great!!", Tone.ENTHUSIASTIC),
        ("WOW nice", Tone.ENTHUSIASTIC),
        ("yay", Tone.ENTHUSIASTIC),
        ("LOL ok", Tone.CASUAL),
        ("haha sure", Tone.CASUAL),
        ("Thank you for the update", Tone.FORMAL),
        ("Best Regards, Anna", Tone.FORMAL),
        ("Sincerely yours", Tone.FORMAL),
        ("see you at 5", Tone.NEUTRAL),
        ("great!", Tone.NEUTRAL),
        ("", Tone.NEUTRAL),
    ],
)
def test_classification(text, tone):
    assert classify_tone(text)[0] is tone


def test_whole_word_matching_only():
    assert classify_tone("wowza, a lollipop")[0] is Tone.NEUTRAL
    assert classify_tone("hahaha")[0] is Tone.NEUTRAL


def test_formal_phrases_match_as_substrings():
    assert classify_tone("kindregards")[0] is Tone.FORMAL


def test_priority_enthusiastic_beats_formal():
    assert classify_tone("Thank you so much!!")[0] is Tone.ENTHUSIASTIC
    assert classify_tone("wow, thank you")[0] is Tone.ENTHUSIASTIC


def test_priority_casual_beats_formal():
    assert classify_tone("haha thank you")[0] is Tone.CASUAL


@pytest.mark.parametrize("text", ["thank you 🙏", "lol 😂", "sure ✌", "ok 🤝"])
def test_emojis_reported_regardless_of_tone(text):
    tone, emojis = classify_tone(text)
    assert emojis is True
    assert tone is Tone.ENTHUSIASTIC


def test_no_emojis_for_plain_text():
    assert has_emojis("lol see you :)") is False
    assert classify_tone("lol see you")[1] is False


def test_deterministic():
    assert classify_tone("haha ok") == classify_tone("haha ok")
