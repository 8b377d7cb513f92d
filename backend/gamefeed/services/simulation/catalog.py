import json
from typing import Dict, Iterable, Mapping, Tuple

from gamefeed.models import EventDefinition


DEFAULT_EVENTS: Tuple[EventDefinition, ...] = (
    EventDefinition('touchdown', 6, frozenset({'QB', 'RB', 'WR', 'TE'})),
    EventDefinition('field_goal', 3, frozenset({'K'})),
    EventDefinition('interception', -2, frozenset({'QB'})),
    EventDefinition('fumble', -2, frozenset({'RB', 'WR'})),
    EventDefinition('big_play', 2, frozenset({'QB', 'RB', 'WR', 'TE'})),
    EventDefinition('target', 1, frozenset({'WR', 'TE'})),
    EventDefinition('carry', 0.5, frozenset({'RB'})),
    EventDefinition('sack', 2, frozenset({'DEF'})),
    EventDefinition('defensive_td', 6, frozenset({'DEF'})),
)

DEFAULT_FIRE_PROBABILITIES: Dict[str, float] = {
    'QB': 0.30,
    'RB': 0.25,
    'WR': 0.20,
    'K': 0.15,
    'DEF': 0.20,
}

DEFAULT_PROBABILITY = 0.15


def _role_set(roles) -> frozenset:
    # a bare string would iterate into single characters
    if isinstance(roles, (str, bytes)) or not isinstance(roles, Iterable):
        raise ValueError(f'eligible_roles must be a list of roles, got {roles!r}')
    return frozenset(str(role) for role in roles)


class EventCatalog:
    """Immutable table of scoring events and per-role fire probabilities."""

    def __init__(
        self,
        events: Iterable[EventDefinition] = DEFAULT_EVENTS,
        fire_probabilities: Mapping[str, float] = None,
        default_probability: float = DEFAULT_PROBABILITY,
    ):
        self._events = tuple(events)
        probs = DEFAULT_FIRE_PROBABILITIES if fire_probabilities is None else fire_probabilities
        if not isinstance(probs, Mapping):
            raise ValueError(f'fire probabilities must map role to probability, got {type(probs).__name__}')
        for role, p in list(probs.items()) + [('*', default_probability)]:
            if not 0.0 <= float(p) <= 1.0:
                raise ValueError(f'fire probability for {role!r} must be within [0, 1], got {p}')
        self._probabilities = {role: float(p) for role, p in probs.items()}
        self._default_probability = float(default_probability)
        by_role: Dict[str, Tuple[EventDefinition, ...]] = {}
        for ev in self._events:
            for role in ev.eligible_roles:
                by_role[role] = by_role.get(role, ()) + (ev,)
        self._by_role = by_role

    @classmethod
    def from_dict(cls, data: Mapping) -> 'EventCatalog':
        try:
            events = [
                EventDefinition(
                    kind=str(e['kind']),
                    base_points=float(e['base_points']),
                    eligible_roles=_role_set(e['eligible_roles']),
                )
                for e in data['events']
            ]
        except (KeyError, TypeError) as exc:
            raise ValueError(f'invalid event catalog: {exc!r}') from exc
        return cls(
            events,
            fire_probabilities=data.get('fire_probabilities', DEFAULT_FIRE_PROBABILITIES),
            default_probability=data.get('default_probability', DEFAULT_PROBABILITY),
        )

    @classmethod
    def from_file(cls, path: str) -> 'EventCatalog':
        with open(path, 'r', encoding='utf-8') as fh:
            return cls.from_dict(json.load(fh))

    @property
    def events(self) -> Tuple[EventDefinition, ...]:
        return self._events

    def eligible_for(self, role: str) -> Tuple[EventDefinition, ...]:
        return self._by_role.get(role, ())

    def fire_probability(self, role: str) -> float:
        return self._probabilities.get(role, self._default_probability)

    def to_dict(self):
        return {
            'events': [e.to_dict() for e in self._events],
            'fire_probabilities': dict(self._probabilities),
            'default_probability': self._default_probability,
        }
