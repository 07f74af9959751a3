"""Resolve voiceover audio references to clips and their lengths."""

import logging
import os

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from voiceover_subtitles.constants import AUDIO_DIR, AUDIO_EXTENSIONS
from voiceover_subtitles.errors import MissingResourceError

logger = logging.getLogger(__name__)


class ClipLibrary:
    """Audio clips under one directory, addressed by file name without extension.

    Lengths are cached per reference since a clip is decoded once per scene.
    """

    def __init__(self, audio_dir: str = AUDIO_DIR):
        self.audio_dir = audio_dir
        self._lengths: dict[str, float] = {}

    def resolve_path(self, audio_ref: str) -> str:
        """Find the file for audio_ref, trying AUDIO_EXTENSIONS in order."""
        direct = os.path.join(self.audio_dir, audio_ref)
        if os.path.splitext(audio_ref)[1] and os.path.isfile(direct):
            return direct
        for ext in AUDIO_EXTENSIONS:
            path = direct + ext
            if os.path.isfile(path):
                return path
        raise MissingResourceError(f"No audio clip for '{audio_ref}' in {self.audio_dir}")

    def clip_length(self, audio_ref: str) -> float:
        """Clip length in seconds.

        A clip that exists but cannot be decoded (corrupt file, no ffmpeg for
        its format) raises MissingResourceError like an absent one.
        """
        if audio_ref not in self._lengths:
            path = self.resolve_path(audio_ref)
            try:
                audio = AudioSegment.from_file(path)
            except (CouldntDecodeError, OSError) as e:
                raise MissingResourceError(f"Could not decode audio clip '{audio_ref}' at {path}: {e}") from e
            self._lengths[audio_ref] = len(audio) / 1000
        return self._lengths[audio_ref]


class FixedLengthClips:
    """Every reference resolves to the same length; for previews without audio files."""

    def __init__(self, length: float):
        self.length = length

    def clip_length(self, audio_ref: str) -> float:
        return self.length


class ClipPlayer:
    """Tracks which clip is playing for the scheduler.

    Sound output belongs to the host engine; this player only resolves clip
    lengths and records play/stop so the subtitle clock can run on its own.
    """

    def __init__(self, library):
        self.library = library
        self.now_playing: str | None = None

    def clip_length(self, audio_ref: str) -> float:
        return self.library.clip_length(audio_ref)

    def play(self, audio_ref: str) -> None:
        logger.debug("Playing clip %s", audio_ref)
        self.now_playing = audio_ref

    def stop(self) -> None:
        if self.now_playing is not None:
            logger.debug("Stopping clip %s", self.now_playing)
        self.now_playing = None
