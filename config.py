"""
Runtime settings, read from the environment.
"""
import os
from typing import List

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "minispace")

PORT = int(os.getenv("PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Shown on profile cards as "<host>/<username>"
SITE_HOST = os.getenv("SITE_HOST", "minispace.dev")

DEFAULT_ACCENT_COLOR = "#3b82f6"
DEFAULT_LAYOUT = "{displayProfileCard}\n\n{displayPosts}"


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]
