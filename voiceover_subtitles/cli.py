"""CLI interface: convert CSV sheets, inspect scene collections, preview playback."""

import argparse
import asyncio
import logging
import os
import sys

from voiceover_subtitles.audio import ClipLibrary, ClipPlayer, FixedLengthClips
from voiceover_subtitles.constants import AUDIO_DIR, CSV_DIR, JSON_DIR, VERSION
from voiceover_subtitles.context import VoiceoverContext
from voiceover_subtitles.converter import convert_file
from voiceover_subtitles.errors import (
    LookupMissError,
    MalformedRecordError,
    MissingResourceError,
    VoiceoverError,
)
from voiceover_subtitles.loader import load_scene
from voiceover_subtitles.models import Language
from voiceover_subtitles.timing import derive_segments

PLAY_POLL_SECONDS = 0.05


class ConsoleSink:
    """Subtitle sink that prints every text change."""

    def __init__(self):
        self.visible = True

    def show_text(self, text: str) -> None:
        if not self.visible:
            return
        print(f"  | {text}" if text else "  | (cleared)")

    def enable(self) -> None:
        self.visible = True

    def disable(self) -> None:
        self.visible = False


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def _load_scene_or_exit(scene: str, json_dir: str):
    try:
        return load_scene(scene, json_dir)
    except MissingResourceError as e:
        _fail(f"{e}. Run 'voiceover-subtitles convert' first.")
    except VoiceoverError as e:
        _fail(f"Scene '{scene}' could not be loaded: {e}")


def _clip_source(args):
    if args.clip_length is not None:
        return FixedLengthClips(args.clip_length)
    return ClipLibrary(args.audio_dir)


def cmd_convert(args):
    """Convert one or more CSV sheets to scene JSON collections."""
    failed = 0
    for path in args.files:
        csv_dir = args.csv_dir or os.path.dirname(path) or "."
        csv_name = os.path.basename(path)
        try:
            output = convert_file(csv_name, csv_dir=csv_dir, json_dir=args.json_dir)
        except FileNotFoundError:
            print(f"Error: File not found: {os.path.join(csv_dir, csv_name)}", file=sys.stderr)
            failed += 1
            continue
        except MalformedRecordError as e:
            print(f"Error: {csv_name}: {e}", file=sys.stderr)
            failed += 1
            continue

        if output is None:
            print(f"Error: Could not write output for {csv_name} to {args.json_dir}", file=sys.stderr)
            failed += 1
        else:
            print(f"Converted {csv_name} → {output}")

    if failed:
        raise SystemExit(1)


def cmd_list(args):
    """List the lines of a scene collection."""
    vo_map = _load_scene_or_exit(args.scene, args.json_dir)
    lines = sorted(vo_map.lines(), key=lambda line: line.key)
    if not lines:
        print("No voiceover lines found.")
        return
    print(f"Scene: {args.scene} ({len(lines)} lines)")
    for line in lines:
        counts = " ".join(
            f"{lang.code}:{len(line.for_language(lang).lines)}" for lang in Language
        )
        print(f"  {line.key:<20} {line.audio_file_name:<24} {counts}")


def cmd_preview(args):
    """Print the subtitle timeline of one line."""
    vo_map = _load_scene_or_exit(args.scene, args.json_dir)
    try:
        line = vo_map.resolve(args.key)
    except LookupMissError:
        _fail(f"No line '{args.key}' in scene '{args.scene}'")

    try:
        clip_length = _clip_source(args).clip_length(line.audio_file_name)
    except MissingResourceError as e:
        _fail(f"{e}. Pass --clip-length to preview without audio.")

    segments = derive_segments(line.for_language(args.lang), clip_length)
    print(f"{line.key} [{args.lang.code}] {line.audio_file_name} ({clip_length:.2f}s)")
    for seg in segments:
        print(f"  {seg.start:7.2f}s  +{seg.duration:5.2f}s  {seg.text}")


async def _play_keys(args) -> int:
    loop = asyncio.get_running_loop()
    player = ClipPlayer(_clip_source(args))
    failed = 0
    with VoiceoverContext(
        args.scene, ConsoleSink(), player, loop,
        json_dir=args.json_dir, language=args.lang,
    ) as context:
        for key in args.keys:
            print(f"▶ {key}")
            if not context.request_playback(key):
                print(f"  [skip] {key}")
                failed += 1
                continue
            while context.scheduler.is_playing:
                await asyncio.sleep(PLAY_POLL_SECONDS)
    return failed


def cmd_play(args):
    """Play lines in real time, printing subtitle changes as they happen."""
    failed = asyncio.run(_play_keys(args))
    if failed:
        raise SystemExit(1)


def _add_clip_args(parser):
    parser.add_argument("--lang", type=Language.parse, default=Language.EN, help="Subtitle language (en, jp)")
    parser.add_argument("--audio-dir", default=AUDIO_DIR, help="Directory holding voiceover clips")
    parser.add_argument("--clip-length", type=float, help="Use this clip length (seconds) instead of reading audio")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="voiceover-subtitles",
        description="Voiceover subtitles: convert CSV sheets and preview timed subtitle playback",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # convert
    convert_parser = subparsers.add_parser("convert", help="Convert CSV sheets to JSON collections")
    convert_parser.add_argument("files", nargs="+", help="CSV files (e.g. voiceovers_forest.csv)")
    convert_parser.add_argument("--csv-dir", help=f"Read files from this directory (e.g. {CSV_DIR})")
    convert_parser.add_argument("--json-dir", default=JSON_DIR, help="Output directory")
    convert_parser.set_defaults(func=cmd_convert)

    # list
    list_parser = subparsers.add_parser("list", help="List lines of a scene")
    list_parser.add_argument("scene", help="Scene name")
    list_parser.add_argument("--json-dir", default=JSON_DIR)
    list_parser.set_defaults(func=cmd_list)

    # preview
    preview_parser = subparsers.add_parser("preview", help="Show the subtitle timeline of a line")
    preview_parser.add_argument("scene", help="Scene name")
    preview_parser.add_argument("key", help="Line key")
    preview_parser.add_argument("--json-dir", default=JSON_DIR)
    _add_clip_args(preview_parser)
    preview_parser.set_defaults(func=cmd_preview)

    # play
    play_parser = subparsers.add_parser("play", help="Play lines with timed subtitles")
    play_parser.add_argument("scene", help="Scene name")
    play_parser.add_argument("keys", nargs="+", help="Line keys, played in order")
    play_parser.add_argument("--json-dir", default=JSON_DIR)
    _add_clip_args(play_parser)
    play_parser.set_defaults(func=cmd_play)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
