import enum
import time
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

RECENT_EVENTS_CAPACITY = 3


def now_ms() -> int:
    return int(time.time() * 1000)


class EntityStatus(str, enum.Enum):
    ACTIVE = 'Active'
    INACTIVE = 'Inactive'


@dataclass(frozen=True)
class Player:
    id: int
    name: str
    role: str
    team: str
    base_points: float

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'role': self.role,
            'team': self.team,
            'basePoints': self.base_points,
        }


DEFAULT_ROSTER: Tuple[Player, ...] = (
    Player(1, 'Josh Allen', 'QB', 'BUF', 18),
    Player(2, 'Patrick Mahomes', 'QB', 'KC', 22),
    Player(3, 'Lamar Jackson', 'QB', 'BAL', 20),
    Player(4, 'Christian McCaffrey', 'RB', 'SF', 15),
    Player(5, 'Derrick Henry', 'RB', 'TEN', 12),
    Player(6, 'Cooper Kupp', 'WR', 'LAR', 14),
    Player(7, 'Davante Adams', 'WR', 'LV', 13),
    Player(8, 'Travis Kelce', 'TE', 'KC', 11),
    Player(9, 'Justin Tucker', 'K', 'BAL', 8),
    Player(10, 'Buffalo Bills', 'DEF', 'BUF', 10),
)


@dataclass(frozen=True)
class EventDefinition:
    kind: str
    base_points: float
    eligible_roles: FrozenSet[str]

    @property
    def description(self) -> str:
        return self.kind.replace('_', ' ')

    def to_dict(self):
        return {
            'kind': self.kind,
            'basePoints': self.base_points,
            'eligibleRoles': sorted(self.eligible_roles),
        }


@dataclass(frozen=True)
class EventRecord:
    kind: str
    points_applied: float
    timestamp: int


@dataclass(frozen=True)
class EntityState:
    """Point-in-time simulation state of one roster player.

    Records are immutable; the store replaces them wholesale, so any
    snapshot handed out stays consistent.
    """

    entity_id: int
    current_score: float
    last_event_at: int
    status: EntityStatus = EntityStatus.ACTIVE
    recent_events: Tuple[EventRecord, ...] = field(default_factory=tuple)

    @classmethod
    def fresh(cls, player: Player, now: int) -> 'EntityState':
        return cls(entity_id=player.id, current_score=player.base_points, last_event_at=now)

    def with_event(self, record: EventRecord) -> 'EntityState':
        history = (record,) + self.recent_events
        return replace(
            self,
            current_score=self.current_score + record.points_applied,
            last_event_at=max(self.last_event_at, record.timestamp),
            recent_events=history[:RECENT_EVENTS_CAPACITY],
        )


@dataclass(frozen=True)
class MatchPhase:
    quarter: int = 1
    time_remaining_label: str = '15:00'
    in_progress: bool = True
    simulation_enabled: bool = True

    @property
    def message(self) -> str:
        if not self.simulation_enabled:
            return 'Live data mode - simulation disabled'
        if not self.in_progress:
            return 'Game completed'
        return f'Live simulation: Q{self.quarter} {self.time_remaining_label}'

    def to_dict(self):
        return {
            'simulationEnabled': self.simulation_enabled,
            'inProgress': self.in_progress,
            'quarter': self.quarter,
            'timeRemainingLabel': self.time_remaining_label,
            'message': self.message,
        }


@dataclass(frozen=True)
class Decision:
    """An event chosen by the simulator together with its noisy delta."""

    definition: EventDefinition
    delta: float

    def to_dict(self):
        return {
            'kind': self.definition.kind,
            'delta': self.delta,
            'description': self.definition.description,
        }


def find_player(roster, player_id) -> Optional[Player]:
    for p in roster:
        if p.id == player_id:
            return p
    return None
