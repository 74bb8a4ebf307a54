"""Configuration for the studio generation flow."""

MODE_TEXT_TO_VIDEO = "text-to-video"
MODE_IMAGE_TO_VIDEO = "image-to-video"
MODE_FIRST_LAST_FRAME = "first-last-frame"

MODES = {
    MODE_TEXT_TO_VIDEO: "Text to Video",
    MODE_IMAGE_TO_VIDEO: "Image to Video",
    MODE_FIRST_LAST_FRAME: "First & Last Frame",
}

DURATIONS = (5, 10)
QUALITIES = ("480p", "720p", "1080p")
ASPECT_RATIOS = ("16:9", "9:16", "1:1", "4:3", "3:4", "21:9")

DEFAULT_MODE = MODE_TEXT_TO_VIDEO
DEFAULT_DURATION = 5
DEFAULT_QUALITY = "720p"
DEFAULT_ASPECT_RATIO = "16:9"

MAX_PROMPT_LENGTH = 2000

# Reference files for multi-modal input.
REF_TYPES = {
    "face": "Face Ref",
    "motion": "Motion Ref",
    "structure": "Structure Ref",
    "style": "Style Ref",
    "audio": "Audio Ref",
}
MAX_REFERENCE_FILES = 12

# Generation statuses as shown to the user.
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

# Vendor task states folded into the three user-facing statuses.
VENDOR_STATUS_MAP = {
    "pending": STATUS_PROCESSING,
    "queued": STATUS_PROCESSING,
    "submitted": STATUS_PROCESSING,
    "processing": STATUS_PROCESSING,
    "running": STATUS_PROCESSING,
    "completed": STATUS_COMPLETED,
    "succeeded": STATUS_COMPLETED,
    "failed": STATUS_FAILED,
    "cancelled": STATUS_FAILED,
    "canceled": STATUS_FAILED,
}

# The studio page polls each processing generation on a fixed timer.
POLL_INTERVAL = 5.0
POLL_TIMEOUT = 900
