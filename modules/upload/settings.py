"""Configuration for reference image uploads."""

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
MAX_FILE_SIZE = 10 * 1024 * 1024
