"""Turn a line's transition timestamps into timed display segments."""

import logging
from dataclasses import dataclass

from voiceover_subtitles.models import LangObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplaySegment:
    text: str
    start: float      # seconds from clip start
    duration: float   # seconds


def derive_durations(timestamps, clip_length: float) -> list[float]:
    """Durations of the len(timestamps) + 1 display intervals of a clip.

    No timestamps → one interval covering the whole clip. Otherwise the
    first interval runs to timestamps[0], each middle one spans consecutive
    timestamps, and the last runs from timestamps[-1] to the clip end.
    A negative result (timestamp past the clip end) is clamped to zero.
    """
    if not timestamps:
        return [max(clip_length, 0.0)]

    durations = [timestamps[0]]
    for i in range(1, len(timestamps)):
        durations.append(timestamps[i] - timestamps[i - 1])
    durations.append(clip_length - timestamps[-1])

    if durations[-1] < 0:
        logger.warning(
            "Timestamp %.3fs is past the clip end (%.3fs); last segment clamped to 0",
            timestamps[-1], clip_length,
        )
    return [max(d, 0.0) for d in durations]


def derive_segments(lang_object: LangObject, clip_length: float) -> list[DisplaySegment]:
    """Pair each line with its start offset and display duration."""
    durations = derive_durations(lang_object.timestamps, clip_length)
    starts = [0.0] + list(lang_object.timestamps)
    return [
        DisplaySegment(text=text, start=start, duration=duration)
        for text, start, duration in zip(lang_object.lines, starts, durations)
    ]
