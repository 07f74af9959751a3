"""Shared fixtures for voiceover subtitle tests."""

import csv
import itertools

import pytest
from pydub import AudioSegment

from voiceover_subtitles.errors import MissingResourceError


CSV_COLUMNS = ["key", "audiofilename", "timestamps_en", "lines_en", "timestamps_jp", "lines_jp"]


def make_row(key="intro", audio="intro_clip", ts_en="1.0,2.5", lines_en="Hello^There^Friend",
             ts_jp="1.2", lines_jp="こんにちは^友よ"):
    """One source row with both languages filled in."""
    return {
        "key": key,
        "audiofilename": audio,
        "timestamps_en": ts_en,
        "lines_en": lines_en,
        "timestamps_jp": ts_jp,
        "lines_jp": lines_jp,
    }


def write_csv(path, rows, columns=CSV_COLUMNS):
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
    return str(path)


class FakeHandle:
    def __init__(self, when, seq, callback):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Manual clock with asyncio's call_later() signature."""

    def __init__(self):
        self.now = 0.0
        self._handles = []
        self._seq = itertools.count()

    def call_later(self, delay, callback):
        handle = FakeHandle(self.now + delay, next(self._seq), callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds):
        """Move the clock forward, firing due callbacks in order."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = max(self.now, handle.when)
            handle.callback()
        self.now = target


class RecordingSink:
    def __init__(self):
        self.texts = []
        self.enabled = True

    @property
    def current(self):
        return self.texts[-1] if self.texts else None

    def show_text(self, text):
        self.texts.append(text)

    def enable(self):
        self.enabled = True

    def disable(self):
        self.enabled = False


class FakeAudio:
    def __init__(self, lengths=None):
        self.lengths = lengths or {}
        self.played = []
        self.stops = 0

    def clip_length(self, audio_ref):
        if audio_ref not in self.lengths:
            raise MissingResourceError(f"No audio clip for '{audio_ref}'")
        return self.lengths[audio_ref]

    def play(self, audio_ref):
        self.played.append(audio_ref)

    def stop(self):
        self.stops += 1


@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def audio():
    return FakeAudio({"intro_clip": 4.0, "outro_clip": 3.0, "single_clip": 2.0})


@pytest.fixture
def sample_rows():
    """Rows covering multi-segment, single-timestamp and whole-clip lines."""
    return [
        make_row(),
        make_row(key="outro", audio="outro_clip", ts_en="0.5", lines_en="Goodbye,^for now",
                 ts_jp="", lines_jp="さようなら"),
        make_row(key="single", audio="single_clip", ts_en="", lines_en="Just one line",
                 ts_jp="", lines_jp="一行だけ"),
    ]


@pytest.fixture
def scene_dirs(tmp_path, sample_rows):
    """CSV dir with voiceovers_forest.csv and an empty JSON dir path."""
    csv_dir = tmp_path / "csv"
    csv_dir.mkdir()
    write_csv(csv_dir / "voiceovers_forest.csv", sample_rows)
    return str(csv_dir), str(tmp_path / "json")


@pytest.fixture
def tiny_wav(tmp_path):
    """Generate a 1.5s silent WAV clip named intro_clip.wav."""
    audio_dir = tmp_path / "audio"
    audio_dir.mkdir()
    AudioSegment.silent(duration=1500).export(str(audio_dir / "intro_clip.wav"), format="wav")
    return audio_dir
