"""Per-scene ownership of the loaded voiceover map and its scheduler."""

import logging

from voiceover_subtitles.constants import JSON_DIR, MISSING_FILE_MSG, INVALID_FILE_MSG
from voiceover_subtitles.errors import DeserializationError, DuplicateKeyError, MissingResourceError
from voiceover_subtitles.loader import load_scene, scene_json_file
from voiceover_subtitles.models import Language
from voiceover_subtitles.scheduler import PlaybackScheduler

logger = logging.getLogger(__name__)


class VoiceoverContext:
    """One active scene: its collection and the scheduler serving it.

    Construct one when a scene becomes active and close() it on teardown.
    If the scene's collection cannot be loaded the scheduler stays in the
    error display state for the context's lifetime instead of raising.
    """

    def __init__(
        self,
        scene: str,
        sink,
        audio,
        loop,
        json_dir: str = JSON_DIR,
        language: Language = Language.EN,
    ):
        self.scene = scene
        self.json_file = scene_json_file(scene)
        self.load_error: Exception | None = None

        try:
            vo_map = load_scene(scene, json_dir)
        except (MissingResourceError, DeserializationError, DuplicateKeyError) as e:
            logger.warning("Voiceovers unavailable for scene %s: %s", scene, e)
            self.load_error = e
            vo_map = None

        self.scheduler = PlaybackScheduler(vo_map, sink, audio, loop, language=language)
        if isinstance(self.load_error, MissingResourceError):
            self.scheduler.enter_error_display(MISSING_FILE_MSG.format(filename=self.json_file))
        elif self.load_error is not None:
            self.scheduler.enter_error_display(INVALID_FILE_MSG.format(filename=self.json_file))

    @property
    def vo_map(self):
        return self.scheduler.vo_map

    def request_playback(self, key: str, interrupt: bool = True) -> bool:
        return self.scheduler.request_playback(key, interrupt)

    def on_marker(self, key: str) -> bool:
        """Timeline marker hook; markers always interrupt the current line."""
        return self.scheduler.request_playback(key, interrupt=True)

    def set_language(self, language: Language) -> None:
        self.scheduler.set_language(language)

    def enable_display(self) -> None:
        self.scheduler.enable_display()

    def disable_display(self) -> None:
        self.scheduler.disable_display()

    def toggle_display(self) -> None:
        self.scheduler.toggle_display()

    def close(self) -> None:
        """Tear down: stop any running line and release the map."""
        self.scheduler.stop()
        self.scheduler.vo_map = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
