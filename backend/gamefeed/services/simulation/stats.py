import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from gamefeed.errors import PlayerNotFound
from gamefeed.models import Decision, EntityState, MatchPhase, Player, find_player
from gamefeed.services.narrative import Narrator, fallback_narrative
from .clock import MatchClock
from .simulator import EventSimulator
from .store import EntityStateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsResult:
    player: Player
    state: EntityState
    phase: MatchPhase
    stats: Dict[str, Any]
    narrative: str
    event: Optional[Decision]

    def to_dict(self):
        return {
            'player': self.player.to_dict(),
            'stats': dict(self.stats),
            'narrative': self.narrative,
            'recentEvent': self.event.to_dict() if self.event else None,
            'simulation': {
                'enabled': self.phase.simulation_enabled,
                'inProgress': self.phase.in_progress,
            },
        }


class StatsQueryService:
    def __init__(
        self,
        roster: Sequence[Player],
        store: EntityStateStore,
        clock: MatchClock,
        simulator: EventSimulator,
        narrator: Narrator,
        rng: Optional[random.Random] = None,
        fallback_range=(5, 29),
    ):
        self.roster = tuple(roster)
        self.store = store
        self.clock = clock
        self.simulator = simulator
        self.narrator = narrator
        self.rng = rng or random.Random()
        self.fallback_range = fallback_range

    def query_stats(self, entity_id: int, now: int) -> StatsResult:
        player = find_player(self.roster, entity_id)
        if player is None:
            raise PlayerNotFound(entity_id)
        state = self.store.get(entity_id)
        phase = self.clock.snapshot()

        decision = self.simulator.decide(player, state, phase, now)
        if decision is not None:
            applied = []

            def _apply(current):
                updated = self.simulator.apply_event(current, decision, now)
                if updated is not current:
                    applied.append(updated)
                return updated

            state = self.store.mutate(entity_id, _apply)
            if applied:
                logger.info(
                    f"[event] player={entity_id} kind={decision.definition.kind} delta={decision.delta:.2f} score={state.current_score:.2f}"
                )
            else:
                decision = None

        if phase.simulation_enabled:
            score = state.current_score
        else:
            score = self.rng.randint(*self.fallback_range)

        stats = {
            'score': score,
            'status': state.status.value,
            'quarter': phase.quarter,
            'timeRemainingLabel': phase.time_remaining_label,
            'inProgress': phase.in_progress,
            'lastUpdate': datetime.fromtimestamp(now / 1000.0, tz=timezone.utc).isoformat(),
        }

        # Score mutation above is final regardless of what the narrator does
        try:
            narrative = self.narrator.generate(player, stats, decision)
        except Exception as exc:
            logger.warning(f"[narrative-fallback] player={entity_id} reason={exc}")
            narrative = fallback_narrative(player, stats)

        return StatsResult(
            player=player, state=state, phase=phase, stats=stats, narrative=narrative, event=decision
        )
