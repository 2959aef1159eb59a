"""Tests for runtime wiring."""

import httpx
import pytest

from trackmirror.config import (
    LastfmSettings,
    MirrorSettings,
    Settings,
    SliderKzSettings,
    TidalSettings,
)
from trackmirror.domain.exceptions import ConfigurationError
from trackmirror.infrastructure.lifecycle import TrackMirrorRuntime, build_registry

LASTFM_SEARCH = {
    "results": {
        "trackmatches": {
            "track": [
                {
                    "name": "Shape of You",
                    "artist": "Ed Sheeran",
                    "url": "https://www.last.fm/music/Ed+Sheeran/_/Shape+of+You",
                    "duration": "233",
                }
            ]
        }
    }
}

SLIDERKZ_SEARCH = {
    "audios": {
        "": [
            {
                "id": "1",
                "tit_art": "Ed Sheeran - Shape of You",
                "duration": 234,
                "url": "download/1/234/shape.mp3",
            }
        ]
    }
}


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "ws.audioscrobbler.com":
        return httpx.Response(200, json=LASTFM_SEARCH)
    if request.url.host == "hayqbhgr.slider.kz":
        return httpx.Response(200, json=SLIDERKZ_SEARCH)
    return httpx.Response(404)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        lastfm=LastfmSettings(api_key="test-key"),
        tidal=TidalSettings(token="test-token"),
    )


class TestBuildRegistry:
    """Test provider registration from settings."""

    def test_all_configured(self, settings: Settings) -> None:
        registry, clients = build_registry(settings)

        assert [p.name for p in registry.all()] == ["lastfm", "sliderkz", "tidal"]
        assert len(clients) == 3

    def test_missing_credentials_skip_provider(self) -> None:
        registry, clients = build_registry(Settings(_env_file=None))

        assert [p.name for p in registry.all()] == ["sliderkz"]
        assert len(clients) == 1


class TestTrackMirrorRuntime:
    """Test the runtime context manager."""

    async def test_resolve_then_mirror(self, settings: Settings) -> None:
        """Test Last.fm metadata played through a slider.kz mirror."""
        async with TrackMirrorRuntime(
            settings, transport=httpx.MockTransport(_handler), configure_logs=False
        ) as runtime:
            sessions = await runtime.playback.open("lfmsearch:shape of you")
            assert len(sessions) == 1

            stream = await sessions[0].open_stream()

        assert stream is not None
        assert stream.is_mirrored
        assert stream.url == "https://hayqbhgr.slider.kz/download/1/234/shape.mp3"
        assert stream.track.canonical_url == "https://www.last.fm/music/Ed+Sheeran/_/Shape+of+You"

    async def test_clients_closed_on_exit(self, settings: Settings) -> None:
        runtime = TrackMirrorRuntime(
            settings, transport=httpx.MockTransport(_handler), configure_logs=False
        )
        async with runtime:
            await runtime.engine.resolve("sksearch:shape of you")
            clients = list(runtime._clients)
            assert any(client.is_open for client in clients)

        assert not any(client.is_open for client in clients)

    async def test_clients_closed_on_error(self, settings: Settings) -> None:
        runtime = TrackMirrorRuntime(
            settings, transport=httpx.MockTransport(_handler), configure_logs=False
        )
        with pytest.raises(RuntimeError):
            async with runtime:
                await runtime.engine.resolve("sksearch:shape of you")
                clients = list(runtime._clients)
                raise RuntimeError("caller failed")

        assert not any(client.is_open for client in clients)

    async def test_services_unavailable_before_start(self, settings: Settings) -> None:
        runtime = TrackMirrorRuntime(settings, configure_logs=False)
        with pytest.raises(RuntimeError):
            _ = runtime.engine

    async def test_bad_mirror_config_fails_startup(self) -> None:
        settings = Settings(
            _env_file=None,
            sliderkz=SliderKzSettings(enabled=False),
            mirror=MirrorSettings(providers=["sliderkz"]),
        )

        with pytest.raises(ConfigurationError):
            async with TrackMirrorRuntime(settings, configure_logs=False):
                pass
