"""Tests for the Last.fm, slider.kz and Tidal provider descriptors."""

from unittest.mock import MagicMock

import httpx
import pytest

from trackmirror.application.services import ResolutionEngine
from trackmirror.config import LastfmSettings, SliderKzSettings, TidalSettings
from trackmirror.domain.dtos import ItemKind
from trackmirror.domain.exceptions import ProviderTransportError
from trackmirror.infrastructure.integrations import LastfmClient, SliderKzClient, TidalClient
from trackmirror.infrastructure.providers import (
    ProviderRegistry,
    create_lastfm_provider,
    create_sliderkz_provider,
    create_tidal_provider,
)
from trackmirror.infrastructure.providers.lastfm_provider import URL_PATTERN as LASTFM_URL
from trackmirror.infrastructure.providers.tidal_provider import URL_PATTERN as TIDAL_URL


@pytest.fixture
def lastfm_client() -> LastfmClient:
    return LastfmClient(LastfmSettings(api_key="test-key"))


@pytest.fixture
def sliderkz_client() -> SliderKzClient:
    return SliderKzClient(SliderKzSettings())


@pytest.fixture
def tidal_client() -> TidalClient:
    return TidalClient(TidalSettings(token="test-token"))


class TestUrlPatterns:
    """Test the provider URL patterns."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.last.fm/music/Ed+Sheeran/_/Shape+of+You",
            "https://www.lastfm.com/music/Ed+Sheeran/Shape+of+You",
            "http://m.last.fm/track/Ed+Sheeran/Shape+of+You?ref=abc",
        ],
    )
    def test_lastfm_urls(self, url: str) -> None:
        assert LASTFM_URL.fullmatch(url) is not None

    def test_lastfm_captures(self) -> None:
        match = LASTFM_URL.fullmatch("https://www.last.fm/music/Ed+Sheeran/Shape+of+You")
        assert match is not None
        assert match.group("artist") == "Ed+Sheeran"
        assert match.group("track") == "Shape+of+You"

    @pytest.mark.parametrize(
        ("url", "kind", "item_id"),
        [
            ("https://tidal.com/browse/track/77646168", "track", "77646168"),
            ("https://listen.tidal.com/album/77646164", "album", "77646164"),
            (
                "https://tidal.com/playlist/5b0a4d3c-1f2e-4a5b-9c8d-7e6f5a4b3c2d?play=true",
                "playlist",
                "5b0a4d3c-1f2e-4a5b-9c8d-7e6f5a4b3c2d",
            ),
        ],
    )
    def test_tidal_urls(self, url: str, kind: str, item_id: str) -> None:
        match = TIDAL_URL.fullmatch(url)
        assert match is not None
        assert match.group("type") == kind
        assert match.group("id") == item_id

    def test_tidal_artist_url_not_handled(self) -> None:
        assert TIDAL_URL.fullmatch("https://tidal.com/browse/artist/1566") is None


class TestLastfmProvider:
    """Test Last.fm lookup and search."""

    async def test_search_drops_malformed_and_keeps_order(
        self, lastfm_client: LastfmClient, mocker: MagicMock
    ) -> None:
        """Test 3 good hits plus one with a non-numeric duration."""
        hits = [
            {"name": "Shape of You", "artist": "Ed Sheeran", "url": "https://last.fm/1", "duration": "233"},
            {"name": "Shape of You (Acoustic)", "artist": "Ed Sheeran", "url": "https://last.fm/2", "duration": "abc"},
            {"name": "Shape of You", "artist": "Boyce Avenue", "url": "https://last.fm/3", "duration": "211"},
            {"name": "Shape of You", "artist": "J Fla", "url": "https://last.fm/4", "duration": "180"},
        ]
        mocker.patch.object(
            lastfm_client,
            "search_tracks",
            return_value={"results": {"trackmatches": {"track": hits}}},
        )
        provider = create_lastfm_provider(lastfm_client)

        item = await provider.search("shape of you", 6)

        assert item.kind is ItemKind.PLAYLIST
        assert item.playlist is not None
        assert item.playlist.is_search_result is True
        assert item.playlist.name == "Last.fm Music Search: shape of you"
        assert [t.canonical_url for t in item.tracks] == [
            "https://last.fm/1",
            "https://last.fm/3",
            "https://last.fm/4",
        ]
        assert item.playlist.total_duration_ms == (233 + 211 + 180) * 1000

    async def test_engine_search_survives_superscript_duration(
        self, lastfm_client: LastfmClient, mocker: MagicMock
    ) -> None:
        """Test that one "³" duration among valid hits yields a playlist of the rest."""
        hits = [
            {"name": "Song A", "artist": "Artist", "url": "https://last.fm/a", "duration": "200"},
            {"name": "Song B", "artist": "Artist", "url": "https://last.fm/b", "duration": "³"},
            {"name": "Song C", "artist": "Artist", "url": "https://last.fm/c", "duration": "300"},
        ]
        mocker.patch.object(
            lastfm_client,
            "search_tracks",
            return_value={"results": {"trackmatches": {"track": hits}}},
        )
        registry = ProviderRegistry()
        registry.register(create_lastfm_provider(lastfm_client))
        engine = ResolutionEngine(registry)

        item = await engine.resolve("lfmsearch:song")

        assert item is not None
        assert item.kind is ItemKind.PLAYLIST
        assert [t.canonical_url for t in item.tracks] == ["https://last.fm/a", "https://last.fm/c"]

    async def test_lookup_decodes_captures(
        self, lastfm_client: LastfmClient, mocker: MagicMock
    ) -> None:
        get_info = mocker.patch.object(
            lastfm_client,
            "get_track_info",
            return_value={
                "track": {
                    "name": "Shape of You",
                    "artist": {"name": "Ed Sheeran"},
                    "url": "https://www.last.fm/music/Ed+Sheeran/_/Shape+of+You",
                    "duration": "233",
                }
            },
        )
        provider = create_lastfm_provider(lastfm_client)

        item = await provider.lookup({"artist": "Ed+Sheeran", "track": "Shape%20of+You"})

        get_info.assert_awaited_once_with("Ed Sheeran", "Shape of You")
        assert item.kind is ItemKind.TRACK
        assert item.track is not None
        assert item.track.title == "Shape of You"

    @pytest.mark.parametrize("payload", [{"track": {}}, {"track": None}, {}, None])
    async def test_lookup_empty_track_is_not_found(
        self, lastfm_client: LastfmClient, mocker: MagicMock, payload
    ) -> None:
        """Test that an empty track field is NotFound, not an error."""
        mocker.patch.object(lastfm_client, "get_track_info", return_value=payload)
        provider = create_lastfm_provider(lastfm_client)

        item = await provider.lookup({"artist": "A", "track": "B"})

        assert item.is_not_found

    async def test_search_with_no_matches_is_not_found(
        self, lastfm_client: LastfmClient, mocker: MagicMock
    ) -> None:
        mocker.patch.object(
            lastfm_client, "search_tracks", return_value={"results": {"trackmatches": {"track": []}}}
        )
        provider = create_lastfm_provider(lastfm_client)

        assert (await provider.search("nothing", 6)).is_not_found


class TestSliderKzProvider:
    """Test slider.kz search."""

    async def test_search_truncates_to_limit(
        self, sliderkz_client: SliderKzClient, mocker: MagicMock
    ) -> None:
        audios = [
            {"id": str(i), "tit_art": f"Artist - Song {i}", "duration": 100 + i, "url": f"d/{i}.mp3"}
            for i in range(10)
        ]
        mocker.patch.object(sliderkz_client, "search", return_value={"audios": {"": audios}})
        provider = create_sliderkz_provider(sliderkz_client)

        item = await provider.search("artist", 3)

        assert [t.title for t in item.tracks] == ["Song 0", "Song 1", "Song 2"]
        assert all(t.stream_url for t in item.tracks)
        assert provider.mirror_eligible is True
        assert provider.url_pattern is None

    async def test_missing_audios_is_not_found(
        self, sliderkz_client: SliderKzClient, mocker: MagicMock
    ) -> None:
        mocker.patch.object(sliderkz_client, "search", return_value={"audios": {}})
        provider = create_sliderkz_provider(sliderkz_client)

        assert (await provider.search("artist", 6)).is_not_found


class TestTidalProvider:
    """Test Tidal track, collection and search handling."""

    async def test_track_lookup(self, tidal_client: TidalClient, mocker: MagicMock) -> None:
        mocker.patch.object(
            tidal_client,
            "get_track",
            return_value={"id": 1, "title": "Song", "duration": 60, "artists": [{"name": "A"}]},
        )
        provider = create_tidal_provider(tidal_client)

        item = await provider.lookup({"type": "track", "id": "1"})

        assert item.kind is ItemKind.TRACK
        assert item.track is not None
        assert item.track.identifier == "1"

    async def test_album_lookup_uses_title(
        self, tidal_client: TidalClient, mocker: MagicMock
    ) -> None:
        mocker.patch.object(
            tidal_client,
            "get_collection_tracks",
            return_value={
                "items": [
                    {"id": 1, "title": "One", "duration": 60},
                    {"id": 2, "title": "Two", "duration": 70},
                ]
            },
        )
        mocker.patch.object(tidal_client, "get_collection", return_value={"title": "Divide"})
        provider = create_tidal_provider(tidal_client)

        item = await provider.lookup({"type": "album", "id": "42"})

        assert item.playlist is not None
        assert item.playlist.name == "Divide"
        assert item.playlist.is_search_result is False
        assert [t.title for t in item.tracks] == ["One", "Two"]

    async def test_collection_title_failure_falls_back(
        self, tidal_client: TidalClient, mocker: MagicMock
    ) -> None:
        """Test that a failing title call doesn't sink the playlist."""
        mocker.patch.object(
            tidal_client,
            "get_collection_tracks",
            return_value={"items": [{"item": {"id": 1, "title": "One", "duration": 60}}]},
        )
        mocker.patch.object(
            tidal_client,
            "get_collection",
            side_effect=ProviderTransportError("HTTP 500", provider="tidal"),
        )
        provider = create_tidal_provider(tidal_client)

        item = await provider.lookup({"type": "playlist", "id": "uuid-1"})

        assert item.playlist is not None
        assert item.playlist.name == "playlist uuid-1"
        assert len(item.tracks) == 1

    async def test_collection_title_timeout_falls_back(
        self, tidal_client: TidalClient, mocker: MagicMock
    ) -> None:
        mocker.patch.object(
            tidal_client,
            "get_collection_tracks",
            return_value={"items": [{"id": 1, "title": "One", "duration": 60}]},
        )
        mocker.patch.object(
            tidal_client, "get_collection", side_effect=httpx.ReadTimeout("slow")
        )
        provider = create_tidal_provider(tidal_client)

        item = await provider.lookup({"type": "album", "id": "42"})

        assert item.playlist is not None
        assert item.playlist.name == "album 42"

    async def test_search_playlist(self, tidal_client: TidalClient, mocker: MagicMock) -> None:
        mocker.patch.object(
            tidal_client,
            "search_tracks",
            return_value={"tracks": {"items": [{"id": 1, "title": "One", "duration": 60}]}},
        )
        provider = create_tidal_provider(tidal_client)

        item = await provider.search("one", 6)

        assert item.playlist is not None
        assert item.playlist.name == "Tidal Music Search: one"
        assert item.playlist.is_search_result is True
