from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field

from theatre.domain.types import Unit
from theatre.globe.hemisphere import hemisphere_filter
from theatre.globe.projection import GlobeView
from theatre.globe.sampler import GlobeRadiusTracker
from theatre.overlay.composer import OverlayCache, OverlayComposer
from theatre.overlay.recency import Clock, utc_now
from theatre.rules.conflicts import ConflictCatalog
from theatre.rules.settings import OverlaySettings
from theatre.sim.signals import ScalarChannel, Signal

logger = logging.getLogger(__name__)

DEFAULT_CONFLICT = "ukraine"


@dataclass
class OverlaySession:
    composer: OverlayComposer
    view: GlobeView
    radius: ScalarChannel
    tracker: GlobeRadiusTracker
    visible: Signal[bool]
    zoom: Signal[float]
    show_troops: Signal[bool]
    transparent_globe: bool = False
    last_troop_click: str | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def refresh_marker_filter(self) -> None:
        self.composer.set_marker_filter(
            hemisphere_filter(self.view.center, globe=self.view.is_globe, transparent=self.transparent_globe)
        )

    def record_troop_click(self, unit: Unit) -> None:
        self.last_troop_click = unit.id

    def close(self) -> None:
        self.tracker.stop()
        self.composer.stop()


class SessionStore:
    """Sessions keyed by cookie; all share one catalog, one settings object and one overlay cache."""

    def __init__(
        self,
        *,
        catalog: ConflictCatalog | None = None,
        settings: OverlaySettings | None = None,
        cache: OverlayCache | None = None,
        clock: Clock = utc_now,
        default_conflict: str = DEFAULT_CONFLICT,
    ) -> None:
        self.catalog = catalog if catalog is not None else ConflictCatalog()
        self.settings = settings or OverlaySettings.default()
        self.cache = cache if cache is not None else OverlayCache()
        self.clock = clock
        self.default_conflict = default_conflict
        self._sessions: dict[str, OverlaySession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> OverlaySession | None:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str | None) -> tuple[str, OverlaySession]:
        if session_id and session_id in self._sessions:
            return session_id, self._sessions[session_id]

        new_id = str(uuid.uuid4())
        session = self._new_session()
        self._sessions[new_id] = session
        logger.debug("Created overlay session %s", new_id)
        return new_id, session

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def _new_session(self) -> OverlaySession:
        bundle = self.catalog.load(self.default_conflict)
        view = GlobeView(zoom=2.0, globe=True)
        radius = ScalarChannel()
        visible: Signal[bool] = Signal(True)
        zoom: Signal[float] = Signal(view.zoom)
        show_troops: Signal[bool] = Signal(True)
        composer = OverlayComposer(
            bundle,
            settings=self.settings,
            cache=self.cache,
            clock=self.clock,
            visible=visible,
            zoom=zoom,
            show_troops=show_troops,
            host=view,
        )
        tracker = GlobeRadiusTracker(view, radius, self.settings.sampler)
        tracker.start()
        session = OverlaySession(
            composer=composer,
            view=view,
            radius=radius,
            tracker=tracker,
            visible=visible,
            zoom=zoom,
            show_troops=show_troops,
        )
        composer.on_troop_click = session.record_troop_click
        session.refresh_marker_filter()
        return session
