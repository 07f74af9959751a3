"""Load a scene's JSON collection into a read-only lookup keyed by voiceover ID."""

import json
import logging
import os
import zlib
from types import MappingProxyType
from typing import NewType

from voiceover_subtitles.constants import JSON_DIR, SCENE_JSON_PATTERN
from voiceover_subtitles.errors import (
    DeserializationError,
    DuplicateKeyError,
    LookupMissError,
    MissingResourceError,
)
from voiceover_subtitles.models import (
    Language,
    LangObject,
    VoiceoverLine,
    VoiceoverCollection,
    check_segments,
)

logger = logging.getLogger(__name__)

VoiceoverID = NewType("VoiceoverID", int)


def voiceover_id(key: str) -> VoiceoverID:
    """CRC32 of the UTF-8 key; stable across runs and builds."""
    return VoiceoverID(zlib.crc32(key.encode("utf-8")))


def scene_json_file(scene: str) -> str:
    """"Forest" → "voiceovers_forest.json"."""
    return SCENE_JSON_PATTERN.format(scene=scene.lower())


def _expect(condition: bool, where: str, message: str) -> None:
    if not condition:
        raise DeserializationError(f"{where}: {message}")


def _parse_lang_object(data, where: str) -> LangObject:
    _expect(isinstance(data, dict), where, "language entry is not an object")
    timestamps = data.get("timestamps")
    lines = data.get("lines")
    _expect(isinstance(timestamps, list), where, "'timestamps' is not a list")
    _expect(isinstance(lines, list), where, "'lines' is not a list")
    _expect(
        all(isinstance(t, (int, float)) and not isinstance(t, bool) for t in timestamps),
        where, "non-numeric timestamp",
    )
    _expect(all(isinstance(s, str) for s in lines), where, "non-string line")

    timestamps = tuple(float(t) for t in timestamps)
    problem = check_segments(timestamps, lines)
    _expect(problem is None, where, problem or "")
    return LangObject(timestamps=timestamps, lines=tuple(lines))


def _parse_line(data, index: int) -> VoiceoverLine:
    where = f"voiceoverLines[{index}]"
    _expect(isinstance(data, dict), where, "entry is not an object")
    key = data.get("key")
    audio = data.get("audiofilename")
    lang_data = data.get("langObjects")
    _expect(isinstance(key, str) and key != "", where, "missing or empty 'key'")
    _expect(isinstance(audio, str), where, "missing 'audiofilename'")
    _expect(isinstance(lang_data, list), where, "missing 'langObjects'")
    _expect(
        len(lang_data) == len(Language), where,
        f"expected {len(Language)} language entries, got {len(lang_data)}",
    )
    lang_objects = tuple(
        _parse_lang_object(entry, f"{where} ({key}, {lang.code})")
        for lang, entry in zip(Language, lang_data)
    )
    return VoiceoverLine(key=key, audio_file_name=audio, lang_objects=lang_objects)


def collection_from_json(text: str) -> VoiceoverCollection:
    """Decode and validate a persisted collection.

    Raises DeserializationError for invalid JSON or any structural defect.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DeserializationError(f"Invalid JSON: {e}") from e

    _expect(isinstance(data, dict), "document", "top level is not an object")
    entries = data.get("voiceoverLines")
    _expect(isinstance(entries, list), "document", "missing 'voiceoverLines' list")
    return VoiceoverCollection(
        voiceover_lines=tuple(_parse_line(entry, i) for i, entry in enumerate(entries))
    )


class VoiceoverMap:
    """Read-only lookup from voiceover ID to line.

    Each entry keeps the original key so a lookup hit can be checked against
    it; nothing mutates the map after construction, so any number of readers
    may share it.
    """

    def __init__(self, collection: VoiceoverCollection):
        entries = {}
        for line in collection.voiceover_lines:
            vo_id = voiceover_id(line.key)
            if vo_id in entries:
                existing = entries[vo_id]
                if existing.key == line.key:
                    raise DuplicateKeyError(f"Duplicate key: {line.key!r}")
                raise DuplicateKeyError(
                    f"Keys {existing.key!r} and {line.key!r} share voiceover ID {vo_id}"
                )
            entries[vo_id] = line
        self._entries = MappingProxyType(entries)

    @property
    def entries(self):
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> VoiceoverLine | None:
        line = self._entries.get(voiceover_id(key))
        if line is None or line.key != key:
            return None
        return line

    def resolve(self, key: str) -> VoiceoverLine:
        """Return the line for key; raises LookupMissError when absent."""
        line = self.get(key)
        if line is None:
            raise LookupMissError(key)
        return line

    def lines(self) -> list[VoiceoverLine]:
        return list(self._entries.values())


def load_collection(text: str) -> VoiceoverMap:
    """Decode a persisted collection and index it by voiceover ID."""
    return VoiceoverMap(collection_from_json(text))


def load_scene(scene: str, json_dir: str = JSON_DIR) -> VoiceoverMap:
    """Load json_dir/voiceovers_<scene>.json.

    Raises MissingResourceError if the file does not exist, and
    DeserializationError / DuplicateKeyError if its contents are unusable.
    """
    path = os.path.join(json_dir, scene_json_file(scene))
    if not os.path.exists(path):
        raise MissingResourceError(f"Could not find the scene json file at {path}")
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise DeserializationError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise MissingResourceError(f"Could not read the scene json file at {path}: {e}") from e
    vo_map = load_collection(text)
    logger.info("Loaded %d voiceover lines for scene %s", len(vo_map), scene)
    return vo_map
