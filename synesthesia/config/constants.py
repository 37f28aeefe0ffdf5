DEFAULT_BASE_URL = "https://api.music.ai/v1"

MIN_API_KEY_LENGTH = 10

JOB_NAME_PREFIX = "synesthesia"

UPLOAD_CONTENT_TYPE = "audio/mpeg"

MAX_RESOLVE_DEPTH = 32

SUCCESS_STATUSES = frozenset({"SUCCEEDED", "COMPLETED", "SUCCESS"})
FAILURE_STATUSES = frozenset({"FAILED"})
PENDING_STATUSES = frozenset({"PENDING", "QUEUED", "STARTED", "PROCESSING", "RUNNING"})

DEMO_STEMS = {
    "drums": "https://tonejs.github.io/audio/drum-samples/CR78/kick.mp3",
    "bass": "https://tonejs.github.io/audio/berklee/bass_loop.mp3",
    "vocals": "https://tonejs.github.io/audio/berklee/gong_1.mp3",
    "guitar": "https://tonejs.github.io/audio/berklee/guitar_loop.mp3",
    "piano": "https://tonejs.github.io/audio/casio/A1.mp3",
}

ALLOWED_AUDIO_EXTENSIONS = {".m4a", ".mp3", ".wav", ".flac", ".aac", ".ogg", ".webm", ".opus"}
