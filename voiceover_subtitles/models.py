"""Data models for voiceover lines and their per-language subtitle segments."""

import math
from dataclasses import dataclass
from enum import IntEnum


class Language(IntEnum):
    """Every language in the subtitle system.

    The value is the index into VoiceoverLine.lang_objects, so the order here
    must match the order of the timestamps_<lang>/lines_<lang> column pairs
    the converter writes. Reordering requires reconverting every CSV.
    """

    EN = 0
    JP = 1

    @property
    def code(self) -> str:
        """Lower-case suffix used in CSV column names ("en", "jp")."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> "Language":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            valid = ", ".join(lang.code for lang in cls)
            raise ValueError(f"Unknown language: {value!r} (expected one of {valid})") from None


@dataclass(frozen=True)
class LangObject:
    timestamps: tuple[float, ...]   # seconds from clip start, strictly increasing
    lines: tuple[str, ...]          # len(timestamps) + 1 entries

    def to_dict(self) -> dict:
        return {"timestamps": list(self.timestamps), "lines": list(self.lines)}


@dataclass(frozen=True)
class VoiceoverLine:
    key: str
    audio_file_name: str
    lang_objects: tuple[LangObject, ...]   # indexed by Language

    def for_language(self, language: Language) -> LangObject:
        return self.lang_objects[int(language)]

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "audiofilename": self.audio_file_name,
            "langObjects": [lang.to_dict() for lang in self.lang_objects],
        }


@dataclass(frozen=True)
class VoiceoverCollection:
    voiceover_lines: tuple[VoiceoverLine, ...]

    def to_dict(self) -> dict:
        return {"voiceoverLines": [line.to_dict() for line in self.voiceover_lines]}


def check_segments(timestamps, lines) -> str | None:
    """Return a description of what is wrong with a timestamps/lines pair, or None.

    Rules: timestamps are finite, non-negative and strictly increasing, and there is
    exactly one more line than there are timestamps (one line when there are
    no timestamps at all).
    """
    for i, ts in enumerate(timestamps):
        if not math.isfinite(ts):
            return f"timestamp {ts} is not finite"
        if ts < 0:
            return f"timestamp {ts} is negative"
        if i > 0 and ts <= timestamps[i - 1]:
            return f"timestamps not strictly increasing at {timestamps[i - 1]} -> {ts}"

    expected = len(timestamps) + 1
    if len(lines) != expected:
        return f"expected {expected} line(s) for {len(timestamps)} timestamp(s), got {len(lines)}"
    return None
