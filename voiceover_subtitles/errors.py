"""Error taxonomy for conversion, loading and playback."""


class VoiceoverError(Exception):
    """Base class for every voiceover/subtitle failure."""


class MalformedRecordError(VoiceoverError, ValueError):
    """A source row is missing a required column or holds unusable values."""


class TimestampParseError(MalformedRecordError):
    """A timestamps cell contains a token that is not a number."""


class DeserializationError(VoiceoverError, ValueError):
    """A persisted collection could not be decoded or failed validation."""


class MissingResourceError(VoiceoverError, FileNotFoundError):
    """A scene collection or audio clip could not be found."""


class DuplicateKeyError(VoiceoverError, ValueError):
    """Two lines in one collection map to the same voiceover ID."""


class LookupMissError(VoiceoverError, KeyError):
    """No line in the loaded collection matches the requested key."""
