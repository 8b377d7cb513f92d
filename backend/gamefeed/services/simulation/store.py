import threading
from contextlib import ExitStack
from typing import Callable, Dict, Iterable, Mapping

from gamefeed.errors import PlayerNotFound
from gamefeed.models import EntityState, EntityStatus, Player


class _Slot:
    __slots__ = ('lock', 'state')

    def __init__(self, state: EntityState):
        self.lock = threading.Lock()
        self.state = state


class EntityStateStore:
    """Thread-safe map of player id -> EntityState.

    Each player has its own lock: writes to one player never wait on another,
    writes to the same player are serialized. The key set is fixed at
    construction so lookups need no global lock.
    """

    def __init__(self, roster: Iterable[Player], now: int):
        self._slots: Dict[int, _Slot] = {
            p.id: _Slot(EntityState.fresh(p, now)) for p in roster
        }

    def _slot(self, entity_id: int) -> _Slot:
        slot = self._slots.get(entity_id)
        if slot is None:
            raise PlayerNotFound(entity_id)
        return slot

    def __contains__(self, entity_id) -> bool:
        return entity_id in self._slots

    def get(self, entity_id: int) -> EntityState:
        slot = self._slot(entity_id)
        with slot.lock:
            return slot.state

    def mutate(self, entity_id: int, transform: Callable[[EntityState], EntityState]) -> EntityState:
        """Apply ``transform`` to the stored record and return the new record."""
        slot = self._slot(entity_id)
        with slot.lock:
            updated = transform(slot.state)
            if updated.entity_id != entity_id:
                raise ValueError(f'transform changed entity id {entity_id} -> {updated.entity_id}')
            slot.state = updated
            return updated

    def reset_all(self, base_scores: Mapping[int, float], now: int) -> None:
        # Locks are taken in id order so concurrent resets cannot deadlock
        with ExitStack() as stack:
            ids = sorted(self._slots)
            for entity_id in ids:
                stack.enter_context(self._slots[entity_id].lock)
            for entity_id in ids:
                self._slots[entity_id].state = EntityState(
                    entity_id=entity_id,
                    current_score=base_scores[entity_id],
                    last_event_at=now,
                    status=EntityStatus.ACTIVE,
                    recent_events=(),
                )

