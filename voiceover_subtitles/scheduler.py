"""Playback scheduler: drives one voiceover's subtitle segments against a clock.

The scheduler owns the displayed text and the "sequence active" state for one
scene. Each displayed segment schedules exactly one deferred callback with
loop.call_later(); advancing shows the next segment and schedules again,
interrupting cancels the outstanding handle. Anything with asyncio's
call_later() signature works as the loop.
"""

import logging
from enum import Enum

from voiceover_subtitles.errors import MissingResourceError
from voiceover_subtitles.models import Language
from voiceover_subtitles.timing import DisplaySegment, derive_segments

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    ERROR_DISPLAY = "error_display"
    PLAYING = "playing"


class PlaybackScheduler:
    """Resolve keys to lines and show their segments in order.

    sink:  show_text(text), enable(), disable()
    audio: clip_length(audio_ref) -> seconds, play(audio_ref), stop()
    loop:  call_later(delay, callback) -> handle with cancel()
    """

    def __init__(self, vo_map, sink, audio, loop, language: Language = Language.EN):
        self.vo_map = vo_map
        self.sink = sink
        self.audio = audio
        self.loop = loop
        self.language = language
        self.state = SchedulerState.IDLE
        self.error_message: str | None = None
        self.display_enabled = True
        self.current_key: str | None = None
        self.segment_index: int | None = None
        self._segments: list[DisplaySegment] = []
        self._handle = None

    @property
    def is_playing(self) -> bool:
        return self.state is SchedulerState.PLAYING

    @property
    def segments(self) -> tuple[DisplaySegment, ...]:
        return tuple(self._segments)

    def enter_error_display(self, message: str) -> None:
        """Switch permanently to the error state; every later request shows message."""
        self._cancel_pending()
        self.vo_map = None
        self.error_message = message
        self.state = SchedulerState.ERROR_DISPLAY

    def set_language(self, language: Language) -> None:
        """Takes effect from the next request; a running sequence keeps its language."""
        self.language = language

    def request_playback(self, key: str, interrupt: bool = True) -> bool:
        """Start the voiceover for key. Returns True if playback was accepted.

        While a sequence is playing, interrupt=False rejects the request and
        leaves it untouched; interrupt=True cancels it and starts key from
        its first segment.
        """
        if self.state is SchedulerState.ERROR_DISPLAY:
            self.sink.show_text(self.error_message)
            return False
        if self.vo_map is None:
            return False

        interrupted = False
        if self.state is SchedulerState.PLAYING:
            if not interrupt:
                return False
            logger.debug("Interrupting %s for %s", self.current_key, key)
            self._cancel_pending()
            self.audio.stop()
            interrupted = True

        line = self.vo_map.get(key)
        if line is None:
            logger.debug("No voiceover line for key %r", key)
            self._finish(clear=interrupted)
            return False

        try:
            clip_length = self.audio.clip_length(line.audio_file_name)
        except MissingResourceError as e:
            logger.warning("Cannot play %s: %s", key, e)
            self._finish(clear=interrupted)
            return False
        except Exception:
            self._finish(clear=interrupted)
            raise

        self._segments = derive_segments(line.for_language(self.language), clip_length)
        self.current_key = key
        self.state = SchedulerState.PLAYING
        self.audio.play(line.audio_file_name)
        self._show(0)
        return True

    def enable_display(self) -> None:
        self.display_enabled = True
        self.sink.enable()

    def disable_display(self) -> None:
        """Hide the subtitle surface; segment timing keeps running."""
        self.display_enabled = False
        self.sink.disable()

    def toggle_display(self) -> None:
        if self.display_enabled:
            self.disable_display()
        else:
            self.enable_display()

    def stop(self) -> None:
        """Cancel any running sequence, stop its audio and clear the text."""
        if self.state is SchedulerState.PLAYING:
            self._cancel_pending()
            self.audio.stop()
            self._finish(clear=True)

    def _show(self, index: int) -> None:
        segment = self._segments[index]
        self.segment_index = index
        self.sink.show_text(segment.text)
        self._handle = self.loop.call_later(segment.duration, self._advance)

    def _advance(self) -> None:
        self._handle = None
        next_index = self.segment_index + 1
        if next_index < len(self._segments):
            self._show(next_index)
        else:
            self.audio.stop()
            self._finish(clear=True)

    def _finish(self, clear: bool) -> None:
        if clear:
            self.sink.show_text("")
        self.state = SchedulerState.IDLE
        self.current_key = None
        self.segment_index = None
        self._segments = []

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
