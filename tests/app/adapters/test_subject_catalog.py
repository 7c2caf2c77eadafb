"""Tests for subject capability lookup."""

from unittest.mock import MagicMock, patch

import requests

from app.adapters.subject_catalog import HttpSubjectCatalog
from app.constants.platforms import ListenPlatform


@patch("app.adapters.subject_catalog.requests.get")
def test_capabilities_parsed(mock_get):
    mock_get.return_value = MagicMock(status_code=200)
    mock_get.return_value.json.return_value = {
        "supports_subscribe": True,
        "listen_platforms": ["Spotify", "apple-music", "myspace"],
    }
    caps = HttpSubjectCatalog("https://profiles.example.com").get_capabilities("artist-1")
    assert caps.supports_subscribe is True
    assert caps.listen_platforms == {ListenPlatform.SPOTIFY, ListenPlatform.APPLE_MUSIC}
    assert mock_get.call_args[0][0] == "https://profiles.example.com/profiles/artist-1/capabilities"


@patch("app.adapters.subject_catalog.requests.get")
def test_unreachable_degrades_to_nothing_supported(mock_get):
    mock_get.side_effect = requests.Timeout("slow")
    caps = HttpSubjectCatalog("https://profiles.example.com").get_capabilities("artist-1")
    assert caps.supports_subscribe is False
    assert caps.supports_listen is False


@patch("app.adapters.subject_catalog.requests.get")
def test_not_found_degrades(mock_get):
    mock_get.return_value = MagicMock(status_code=404)
    caps = HttpSubjectCatalog("https://profiles.example.com").get_capabilities("artist-1")
    assert caps.supports_subscribe is False


@patch("app.adapters.subject_catalog.requests.get")
def test_non_object_body_degrades(mock_get):
    mock_get.return_value = MagicMock(status_code=200)
    mock_get.return_value.json.return_value = ["spotify"]
    caps = HttpSubjectCatalog("https://profiles.example.com").get_capabilities("artist-1")
    assert caps.supports_subscribe is False
    assert caps.supports_listen is False


@patch("app.adapters.subject_catalog.requests.get")
def test_malformed_platform_list_is_ignored(mock_get):
    mock_get.return_value = MagicMock(status_code=200)
    mock_get.return_value.json.return_value = {
        "supports_subscribe": True,
        "listen_platforms": ["spotify", 7, None],
    }
    caps = HttpSubjectCatalog("https://profiles.example.com").get_capabilities("artist-1")
    assert caps.listen_platforms == {ListenPlatform.SPOTIFY}

    mock_get.return_value.json.return_value = {
        "supports_subscribe": True,
        "listen_platforms": "spotify",
    }
    caps = HttpSubjectCatalog("https://profiles.example.com").get_capabilities("artist-1")
    assert caps.supports_subscribe is True
    assert caps.listen_platforms == set()
