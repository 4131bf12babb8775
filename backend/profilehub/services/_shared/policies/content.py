"""Rules for embedded video links attached to profiles."""

from __future__ import annotations

import re

from profilehub.services._shared.errors import ValidationError

VIDEO_TITLE_MAX_LENGTH = 100
YOUTUBE_URL_RE = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/.*$")


def check_video_link(url: object, title: object) -> tuple[str, str]:
    """Validate a YouTube link and its title, returning both stripped of padding."""
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("YouTube URL is required")
    if not YOUTUBE_URL_RE.match(url.strip()):
        raise ValidationError("Invalid YouTube URL format")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    if len(title) > VIDEO_TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be less than {VIDEO_TITLE_MAX_LENGTH} characters")
    return url.strip(), title.strip()
