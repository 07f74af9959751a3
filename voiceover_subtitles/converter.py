"""Convert voiceover CSV sheets into per-scene JSON collections.

Each CSV (e.g. "voiceovers_forest.csv") holds every voiceover line of one
scene in every language. Each row becomes a VoiceoverLine; for every
declared Language the row must carry a timestamps_<lang> and a lines_<lang>
column. The converted collection is written next to the other scene files
as "voiceovers_forest.json".
"""

import csv
import json
import logging
import math
import os

from voiceover_subtitles.constants import (
    TIMESTAMP_SPLIT,
    LINE_SPLIT,
    TIMESTAMPS_COLUMN,
    LINES_COLUMN,
    KEY_COLUMN,
    AUDIO_COLUMN,
    CSV_DIR,
    JSON_DIR,
    JSON_INDENT,
)
from voiceover_subtitles.errors import MalformedRecordError, TimestampParseError
from voiceover_subtitles.models import (
    Language,
    LangObject,
    VoiceoverLine,
    VoiceoverCollection,
    check_segments,
)

logger = logging.getLogger(__name__)


def parse_timestamps(value) -> tuple[float, ...]:
    """Parse a timestamps cell into a tuple of floats.

    "" → (), 1.5 or "1.5" → (1.5,), "1.0,2.5" → (1.0, 2.5).
    Raises TimestampParseError on any token that is not a finite number.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        tokens = [value]
    else:
        text = str(value).strip()
        if not text:
            return ()
        tokens = [token.strip() for token in text.split(TIMESTAMP_SPLIT)]

    result = []
    for token in tokens:
        try:
            number = float(token)
        except ValueError:
            raise TimestampParseError(f"Not a number in timestamps: {token!r}") from None
        if not math.isfinite(number):
            raise TimestampParseError(f"Not a finite timestamp: {token!r}")
        result.append(number)
    return tuple(result)


def parse_lines(value) -> tuple[str, ...]:
    """Split a lines cell on LINE_SPLIT. Empty cell → ()."""
    text = str(value)
    if text == "":
        return ()
    return tuple(text.split(LINE_SPLIT))


def _normalize_row(row: dict) -> dict:
    """Lower-case column names; drop overflow cells csv.DictReader files under None."""
    return {str(k).strip().lower(): v for k, v in row.items() if k is not None}


def _require(row: dict, column: str, row_num: int):
    value = row.get(column)
    if value is None:
        raise MalformedRecordError(f"Row {row_num}: missing required column '{column}'")
    return value


def convert_row(row: dict, row_num: int = 1) -> VoiceoverLine:
    """Convert one parsed CSV row into a VoiceoverLine."""
    row = _normalize_row(row)
    key = str(_require(row, KEY_COLUMN, row_num)).strip()
    if not key:
        raise MalformedRecordError(f"Row {row_num}: empty key")
    audio_file_name = str(_require(row, AUDIO_COLUMN, row_num)).strip()

    lang_objects = []
    for lang in Language:
        timestamps_cell = _require(row, f"{TIMESTAMPS_COLUMN}_{lang.code}", row_num)
        lines_cell = _require(row, f"{LINES_COLUMN}_{lang.code}", row_num)

        try:
            timestamps = parse_timestamps(timestamps_cell)
        except TimestampParseError as e:
            raise TimestampParseError(f"Row {row_num} ({key}, {lang.code}): {e}") from None
        lines = parse_lines(lines_cell)

        problem = check_segments(timestamps, lines)
        if problem:
            raise MalformedRecordError(f"Row {row_num} ({key}, {lang.code}): {problem}")
        lang_objects.append(LangObject(timestamps=timestamps, lines=lines))

    return VoiceoverLine(key=key, audio_file_name=audio_file_name, lang_objects=tuple(lang_objects))


def convert_rows(rows) -> VoiceoverCollection:
    """Convert parsed rows into a collection, preserving row order.

    The first malformed row aborts the whole conversion.
    """
    lines = [convert_row(row, row_num=i + 1) for i, row in enumerate(rows)]
    return VoiceoverCollection(voiceover_lines=tuple(lines))


def read_csv(csv_path: str) -> list[dict]:
    """Read a CSV file into a list of column → cell dicts.

    Raises MalformedRecordError when the file is not UTF-8 text.
    """
    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as f:
            return list(csv.DictReader(f))
    except UnicodeDecodeError as e:
        raise MalformedRecordError(f"{csv_path} is not valid UTF-8: {e}") from e


def json_name_for(csv_name: str) -> str:
    """"voiceovers_forest.csv" → "voiceovers_forest.json"."""
    return os.path.splitext(os.path.basename(csv_name))[0] + ".json"


def collection_to_json(collection: VoiceoverCollection) -> str:
    """Serialize deterministically; equal collections give identical text."""
    return json.dumps(collection.to_dict(), indent=JSON_INDENT, ensure_ascii=False) + "\n"


def write_collection(collection: VoiceoverCollection, json_dir: str, json_name: str) -> str:
    """Write the collection to json_dir/json_name, creating json_dir if absent.

    Returns path to the written file. Raises OSError on filesystem failures.
    """
    os.makedirs(json_dir, exist_ok=True)
    path = os.path.join(json_dir, json_name)
    data = collection_to_json(collection)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(data)
    return path


def convert_file(
    csv_name: str,
    csv_dir: str = CSV_DIR,
    json_dir: str = JSON_DIR,
) -> str | None:
    """Convert csv_dir/csv_name to json_dir/<same base name>.json.

    Returns the output path, or None when the output could not be written
    (logged, not raised). A missing CSV raises FileNotFoundError and a bad
    row raises MalformedRecordError; nothing is written in either case.
    """
    csv_path = os.path.join(csv_dir, csv_name)
    rows = read_csv(csv_path)
    collection = convert_rows(rows)

    try:
        path = write_collection(collection, json_dir, json_name_for(csv_name))
    except OSError as e:
        logger.error("Could not write %s to %s: %s", json_name_for(csv_name), json_dir, e)
        return None

    logger.info("Converted %s: %d lines → %s", csv_name, len(collection.voiceover_lines), path)
    return path
