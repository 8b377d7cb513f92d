import logging
import random
from typing import Any, Callable, Mapping, Optional, Sequence

from gamefeed.models import DEFAULT_ROSTER, MatchPhase, Player, now_ms
from gamefeed.services.narrative import Narrator, OpenAINarrator
from .catalog import EventCatalog
from .clock import MatchClock
from .simulator import EventSimulator
from .stats import StatsQueryService, StatsResult
from .store import EntityStateStore

logger = logging.getLogger(__name__)


class SimulationService:
    """Owns all simulation state for one application instance.

    Built once by the app factory and shared by every request handler, socket
    handler and the clock task. Holds no module-level state.
    """

    def __init__(
        self,
        roster: Sequence[Player] = DEFAULT_ROSTER,
        catalog: Optional[EventCatalog] = None,
        narrator: Optional[Narrator] = None,
        rng: Optional[random.Random] = None,
        clock_fn: Callable[[], int] = now_ms,
        initial_phase: Optional[MatchPhase] = None,
        cooldown_ms: int = 30000,
        noise: float = 1.0,
        tick_interval: float = 60.0,
        advance_probability: float = 0.1,
        end_probability: float = 0.3,
        heartbeat: int = 0,
        fallback_range=(5, 29),
    ):
        self.roster = tuple(roster)
        self.catalog = catalog or EventCatalog()
        self.rng = rng or random.Random()
        self.now = clock_fn
        self.store = EntityStateStore(self.roster, self.now())
        self.clock = MatchClock(
            phase=initial_phase,
            rng=self.rng,
            tick_interval=tick_interval,
            advance_probability=advance_probability,
            end_probability=end_probability,
            heartbeat=heartbeat,
            on_restart=self._reset_entities,
        )
        self.simulator = EventSimulator(self.catalog, rng=self.rng, cooldown_ms=cooldown_ms, noise=noise)
        self.narrator = narrator or OpenAINarrator(api_key=None)
        self.stats = StatsQueryService(
            self.roster,
            self.store,
            self.clock,
            self.simulator,
            self.narrator,
            rng=self.rng,
            fallback_range=fallback_range,
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any], narrator: Optional[Narrator] = None) -> 'SimulationService':
        path = config.get('EVENT_CATALOG_PATH')
        catalog = EventCatalog.from_file(path) if path else EventCatalog()
        seed = config.get('SIM_SEED')
        logger.info(f"[simulation-init] catalog={path or 'built-in'} events={len(catalog.events)} seed={seed}")
        if narrator is None:
            narrator = OpenAINarrator(
                api_key=config.get('OPENAI_API_KEY'),
                base_url=config.get('OPENAI_BASE_URL', 'https://api.openai.com/v1'),
                model=config.get('NARRATIVE_MODEL', 'gpt-3.5-turbo'),
                timeout=int(config.get('NARRATIVE_TIMEOUT_SEC', 8)),
            )
        quarter = int(config.get('INITIAL_QUARTER', 2))
        if not 1 <= quarter <= 4:
            raise ValueError(f'INITIAL_QUARTER must be 1-4, got {quarter}')
        return cls(
            catalog=catalog,
            narrator=narrator,
            rng=random.Random(seed) if seed is not None else random.Random(),
            initial_phase=MatchPhase(
                quarter=quarter,
                time_remaining_label=config.get('INITIAL_TIME_REMAINING', '8:45'),
                in_progress=True,
                simulation_enabled=bool(config.get('SIMULATION_ENABLED', True)),
            ),
            cooldown_ms=int(config.get('EVENT_COOLDOWN_MS', 30000)),
            noise=float(config.get('EVENT_NOISE', 1.0)),
            tick_interval=float(config.get('CLOCK_TICK_SEC', 60)),
            advance_probability=float(config.get('CLOCK_ADVANCE_PROBABILITY', 0.1)),
            end_probability=float(config.get('CLOCK_END_PROBABILITY', 0.3)),
            heartbeat=int(config.get('CLOCK_HEARTBEAT_SEC', 0)),
            fallback_range=(int(config.get('FALLBACK_SCORE_MIN', 5)), int(config.get('FALLBACK_SCORE_MAX', 29))),
        )

    def _reset_entities(self) -> None:
        self.store.reset_all({p.id: p.base_points for p in self.roster}, self.now())

    def players(self):
        return list(self.roster)

    def status(self) -> MatchPhase:
        return self.clock.snapshot()

    def toggle(self) -> bool:
        return self.clock.toggle_simulation()

    def restart_game(self) -> MatchPhase:
        return self.clock.restart()

    def query_stats(self, entity_id: int, now: Optional[int] = None) -> StatsResult:
        return self.stats.query_stats(entity_id, self.now() if now is None else now)

    def start_clock(self, start_task: Callable[..., Any], on_change=None):
        """Start the ticker with ``start_task(fn, *args)``, e.g. socketio.start_background_task."""
        return start_task(self.clock.run, on_change)

    def stop_clock(self) -> None:
        self.clock.stop()
