"""All delimiters, paths and configuration constants."""

TIMESTAMP_SPLIT = ","                        # separates numeric timestamps in a CSV cell
LINE_SPLIT = "^"                             # separates subtitle lines; text may contain commas
TIMESTAMPS_COLUMN = "timestamps"             # per-language column prefix: timestamps_<lang>
LINES_COLUMN = "lines"                       # per-language column prefix: lines_<lang>
KEY_COLUMN = "key"
AUDIO_COLUMN = "audiofilename"
RESOURCES_DIR = "StreamingAssets/VOResources"
CSV_DIR = RESOURCES_DIR + "/TextAssets/CSVFiles"
JSON_DIR = RESOURCES_DIR + "/TextAssets/JSONFiles"
AUDIO_DIR = RESOURCES_DIR + "/Audio"
AUDIO_EXTENSIONS = (".wav", ".mp3", ".ogg")  # tried in order when resolving a clip
SCENE_JSON_PATTERN = "voiceovers_{scene}.json"
MISSING_FILE_MSG = "Missing scene json file: {filename}. Check the file name and directory again."
INVALID_FILE_MSG = "Invalid scene json file: {filename}. Reconvert it from the CSV source."
JSON_INDENT = 2
VERSION = "0.1.0"
