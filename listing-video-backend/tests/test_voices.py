# listing-video-backend/tests/test_voices.py

from services.voices import VOICES, filter_voices, get_voice


def test_english_voices_are_filtered_by_accent():
    voices = filter_voices("English", "UK")
    assert [v.id for v in voices] == ["en-uk-female-1", "en-uk-male-1"]


def test_other_languages_ignore_accent():
    voices = filter_voices("Spanish", "UK")
    assert {v.name for v in voices} == {"Sofia", "Carlos"}


def test_accent_without_voices_returns_nothing():
    assert filter_voices("English", "Canadian") == []


def test_catalog_lookup():
    assert len(VOICES) == 12
    assert get_voice("en-us-female-1").name == "Emma"
    assert get_voice("missing") is None
