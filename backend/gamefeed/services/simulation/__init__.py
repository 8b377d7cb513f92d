"""Simulation domain services: event catalog, player state, match clock.

This package contains the in-memory simulation engine that HTTP routes and
socket handlers call into, keeping transport concerns separated from the
scoring mechanics.
"""

from .catalog import EventCatalog
from .clock import MatchClock
from .service import SimulationService
from .simulator import EventSimulator
from .stats import StatsQueryService, StatsResult
from .store import EntityStateStore

__all__ = [
    'EventCatalog',
    'EntityStateStore',
    'EventSimulator',
    'MatchClock',
    'SimulationService',
    'StatsQueryService',
    'StatsResult',
]
