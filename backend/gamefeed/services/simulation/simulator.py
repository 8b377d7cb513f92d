import logging
import random
from typing import Optional

from gamefeed.models import Decision, EntityState, EventRecord, MatchPhase, Player
from .catalog import EventCatalog

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_MS = 30000
DEFAULT_NOISE = 1.0


class EventSimulator:
    """Decides whether a scoring event fires for a player.

    Holds no simulation state of its own: ``decide`` reads the snapshots it
    is given and ``apply_event`` is a pure transform for ``EntityStateStore.mutate``.
    """

    def __init__(
        self,
        catalog: EventCatalog,
        rng: Optional[random.Random] = None,
        cooldown_ms: int = DEFAULT_COOLDOWN_MS,
        noise: float = DEFAULT_NOISE,
    ):
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.cooldown_ms = int(cooldown_ms)
        self.noise = float(noise)

    def decide(self, player: Player, state: EntityState, phase: MatchPhase, now: int) -> Optional[Decision]:
        if not phase.simulation_enabled or not phase.in_progress:
            return None

        if now - state.last_event_at < self.cooldown_ms:
            return None

        if self.rng.random() >= self.catalog.fire_probability(player.role):
            return None

        eligible = self.catalog.eligible_for(player.role)
        if not eligible:
            return None

        definition = self.rng.choice(eligible)
        delta = definition.base_points + self.rng.uniform(-self.noise, self.noise)
        return Decision(definition=definition, delta=delta)

    def apply_event(self, state: EntityState, decision: Decision, now: int) -> EntityState:
        """Return ``state`` with ``decision`` applied.

        The cooldown is checked again against the locked record: if another
        request landed an event inside the window the record is returned as is.
        """
        if now - state.last_event_at < self.cooldown_ms:
            logger.debug(f"[event-skip] player={state.entity_id} kind={decision.definition.kind} cooldown")
            return state
        record = EventRecord(kind=decision.definition.kind, points_applied=decision.delta, timestamp=now)
        return state.with_event(record)
