"""Runtime wiring for startup and shutdown.

Builds the provider registry from settings, creates the engine, mirror resolver
and playback service on top of it, and closes every HTTP client on the way out.
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from trackmirror.application.services import (
    MirrorResolver,
    PlaybackService,
    ResolutionEngine,
)
from trackmirror.config import Settings, get_settings
from trackmirror.infrastructure.integrations import (
    LastfmClient,
    ProviderHttpClient,
    SliderKzClient,
    TidalClient,
)
from trackmirror.infrastructure.observability import configure_logging
from trackmirror.infrastructure.providers import (
    ProviderRegistry,
    create_lastfm_provider,
    create_sliderkz_provider,
    create_tidal_provider,
)
from trackmirror.infrastructure.retry import RetryListener, RetryPolicy

logger = logging.getLogger(__name__)


# Hey future me, a provider without credentials is NOT an error. Last.fm needs an api key and
# Tidal a token; if they're blank we just don't register them and say so once. Any identifier
# for them then comes back Unrecognized (None) instead of failing with 401s on every call.
def build_registry(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[ProviderRegistry, list[ProviderHttpClient]]:
    """Create clients and register a descriptor for every configured provider.

    Args:
        settings: Application settings
        transport: Optional httpx transport shared by all clients (tests)

    Returns:
        The registry and the clients backing it (caller closes them)
    """
    registry = ProviderRegistry()
    clients: list[ProviderHttpClient] = []
    timeout = settings.http.timeout

    if settings.lastfm.is_configured:
        lastfm = LastfmClient(settings.lastfm, timeout=timeout, transport=transport)
        clients.append(lastfm)
        registry.register(create_lastfm_provider(lastfm))
    else:
        logger.warning("Last.fm api key not set, Last.fm provider disabled")

    if settings.sliderkz.enabled:
        sliderkz = SliderKzClient(settings.sliderkz, timeout=timeout, transport=transport)
        clients.append(sliderkz)
        registry.register(create_sliderkz_provider(sliderkz))
    else:
        logger.info("slider.kz provider disabled by configuration")

    if settings.tidal.is_configured:
        tidal = TidalClient(settings.tidal, timeout=timeout, transport=transport)
        clients.append(tidal)
        registry.register(create_tidal_provider(tidal))
    else:
        logger.warning("Tidal token not set, Tidal provider disabled")

    return registry, clients


class TrackMirrorRuntime:
    """Own the providers and services for one application run.

    Usage:
        async with TrackMirrorRuntime() as runtime:
            item = await runtime.engine.resolve("lfmsearch:shape of you")
            sessions = await runtime.playback.open("sksearch:daft punk")

    Every HTTP client is closed on exit, also when the block raises or is cancelled.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_listener: RetryListener | None = None,
        configure_logs: bool = True,
    ) -> None:
        """Initialize the runtime.

        Args:
            settings: Application settings (default: get_settings())
            transport: Optional httpx transport for all clients (tests)
            retry_listener: Called once per retry, e.g. for counting
            configure_logs: Apply logging settings on enter
        """
        self.settings = settings or get_settings()
        self._transport = transport
        self._retry_listener = retry_listener
        self._configure_logs = configure_logs
        self._clients: list[ProviderHttpClient] = []
        self._registry: ProviderRegistry | None = None
        self._engine: ResolutionEngine | None = None
        self._mirror_resolver: MirrorResolver | None = None
        self._playback: PlaybackService | None = None

    def _not_started(self, name: str) -> RuntimeError:
        return RuntimeError(f"{name} is only available inside 'async with TrackMirrorRuntime()'")

    @property
    def registry(self) -> ProviderRegistry:
        if self._registry is None:
            raise self._not_started("registry")
        return self._registry

    @property
    def engine(self) -> ResolutionEngine:
        if self._engine is None:
            raise self._not_started("engine")
        return self._engine

    @property
    def mirror_resolver(self) -> MirrorResolver:
        if self._mirror_resolver is None:
            raise self._not_started("mirror_resolver")
        return self._mirror_resolver

    @property
    def playback(self) -> PlaybackService:
        if self._playback is None:
            raise self._not_started("playback")
        return self._playback

    async def start(self) -> None:
        """Configure logging and wire providers and services."""
        settings = self.settings
        if self._configure_logs:
            configure_logging(
                log_level=settings.log_level,
                json_format=settings.observability.log_json_format,
                app_name=settings.app_name,
            )
        logger.info("Starting %s", settings.app_name)

        registry, clients = build_registry(settings, transport=self._transport)
        self._clients = clients
        try:
            engine = ResolutionEngine(
                registry,
                retry_policy=RetryPolicy.from_settings(
                    settings.retry, listener=self._retry_listener
                ),
                search_limit=settings.resolution.search_limit,
            )
            mirror_resolver = MirrorResolver(engine, settings.mirror)
        except Exception:
            await self.close()
            raise

        self._registry = registry
        self._engine = engine
        self._mirror_resolver = mirror_resolver
        self._playback = PlaybackService(engine, mirror_resolver)
        logger.info("Providers ready: %s", ", ".join(p.name for p in registry.all()) or "none")

    async def close(self) -> None:
        """Close every provider client."""
        clients, self._clients = self._clients, []
        for client in clients:
            await client.close()
        if clients:
            logger.info("Closed %d provider client(s)", len(clients))

    async def __aenter__(self) -> TrackMirrorRuntime:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
