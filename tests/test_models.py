"""Tests for constants and models (Layer 0)."""

import pytest

from voiceover_subtitles import constants
from voiceover_subtitles.models import (
    Language,
    LangObject,
    VoiceoverLine,
    VoiceoverCollection,
    check_segments,
)


def test_language_order_is_index():
    """Enumeration value doubles as the langObjects index."""
    assert [int(lang) for lang in Language] == list(range(len(Language)))
    assert Language.EN.code == "en"
    assert Language.JP.code == "jp"


def test_language_parse():
    assert Language.parse("jp") is Language.JP
    assert Language.parse(" EN ") is Language.EN
    with pytest.raises(ValueError, match="Unknown language"):
        Language.parse("fr")


def test_for_language_picks_by_index():
    en = LangObject(timestamps=(), lines=("Hi",))
    jp = LangObject(timestamps=(), lines=("やあ",))
    line = VoiceoverLine(key="k", audio_file_name="clip", lang_objects=(en, jp))
    assert line.for_language(Language.JP) is jp


def test_collection_to_dict_field_names():
    """Persisted field names are part of the file format."""
    en = LangObject(timestamps=(1.0,), lines=("a", "b"))
    jp = LangObject(timestamps=(), lines=("c",))
    collection = VoiceoverCollection(
        voiceover_lines=(VoiceoverLine(key="k", audio_file_name="clip", lang_objects=(en, jp)),)
    )
    assert collection.to_dict() == {
        "voiceoverLines": [
            {
                "key": "k",
                "audiofilename": "clip",
                "langObjects": [
                    {"timestamps": [1.0], "lines": ["a", "b"]},
                    {"timestamps": [], "lines": ["c"]},
                ],
            }
        ]
    }


def test_check_segments_valid():
    assert check_segments((), ("whole clip",)) is None
    assert check_segments((1.0, 2.5), ("a", "b", "c")) is None


def test_check_segments_line_count_mismatch():
    assert "expected 3 line(s)" in check_segments((1.0, 2.5), ("a", "b"))
    assert "expected 1 line(s)" in check_segments((), ())


def test_check_segments_ordering():
    assert "strictly increasing" in check_segments((2.0, 1.0), ("a", "b", "c"))
    assert "strictly increasing" in check_segments((1.0, 1.0), ("a", "b", "c"))
    assert "negative" in check_segments((-0.5,), ("a", "b"))


def test_check_segments_non_finite():
    assert "not finite" in check_segments((float("nan"),), ("a", "b"))
    assert "not finite" in check_segments((1.0, float("inf")), ("a", "b", "c"))


def test_constants_exist():
    """All module-level constants are defined."""
    expected = [
        "TIMESTAMP_SPLIT",
        "LINE_SPLIT",
        "CSV_DIR",
        "JSON_DIR",
        "AUDIO_DIR",
        "SCENE_JSON_PATTERN",
        "MISSING_FILE_MSG",
        "INVALID_FILE_MSG",
        "VERSION",
    ]
    for name in expected:
        assert hasattr(constants, name), f"Missing constant: {name}"
    assert constants.TIMESTAMP_SPLIT != constants.LINE_SPLIT
