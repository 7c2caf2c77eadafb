"""Listen platforms (DSPs) and key normalisation."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Optional


class ListenPlatform(StrEnum):
    """Streaming platforms a Listen CTA can be routed to."""

    SPOTIFY = "spotify"
    APPLE_MUSIC = "apple_music"
    YOUTUBE = "youtube"
    YOUTUBE_MUSIC = "youtube_music"
    SOUNDCLOUD = "soundcloud"
    DEEZER = "deezer"
    TIDAL = "tidal"
    BANDCAMP = "bandcamp"
    AMAZON_MUSIC = "amazon_music"
    PANDORA = "pandora"


PLATFORM_ALIASES: dict[str, str] = {
    "apple": "apple_music",
    "applemusic": "apple_music",
    "apple-music": "apple_music",
    "apple music": "apple_music",
    "youtubemusic": "youtube_music",
    "youtube-music": "youtube_music",
    "youtube music": "youtube_music",
    "you tube": "youtube",
    "sound-cloud": "soundcloud",
    "amazon": "amazon_music",
    "amazon-music": "amazon_music",
    "amazon music": "amazon_music",
}


def normalize_platform_key(value: Optional[str]) -> Optional[str]:
    """Lower-case, alias and snake-case a provider key. None for blank input."""
    if not value:
        return None
    trimmed = value.strip().lower()
    if not trimmed:
        return None
    alias = PLATFORM_ALIASES.get(re.sub(r"\s+", " ", trimmed))
    normalized = alias or re.sub(r"[^a-z0-9]+", "_", trimmed)
    return normalized.strip("_") or None


def parse_listen_platform(value: Optional[str]) -> Optional[ListenPlatform]:
    """Return the ListenPlatform for a raw key, or None if it is not a known DSP."""
    key = normalize_platform_key(value)
    if key is None:
        return None
    try:
        return ListenPlatform(key)
    except ValueError:
        return None
