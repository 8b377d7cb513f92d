import logging
import random
import threading
import time
from dataclasses import replace
from typing import Callable, Optional

from gamefeed.models import MatchPhase

logger = logging.getLogger(__name__)

QUARTERS = 4
QUARTER_LENGTH_LABEL = '15:00'
FINAL_LABEL = '0:00'


class MatchClock:
    """Owns the shared MatchPhase and advances it on a fixed interval.

    - All reads return immutable snapshots taken under the phase lock
    - ``tick``, ``toggle_simulation`` and ``restart`` are mutually exclusive
    - Once the match has ended it stays ended until ``restart``
    """

    def __init__(
        self,
        phase: Optional[MatchPhase] = None,
        rng: Optional[random.Random] = None,
        tick_interval: float = 60.0,
        advance_probability: float = 0.1,
        end_probability: float = 0.3,
        heartbeat: int = 0,
        on_restart: Optional[Callable[[], None]] = None,
    ):
        self._phase = phase or MatchPhase()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self.rng = rng or random.Random()
        self.tick_interval = float(tick_interval)
        self.advance_probability = float(advance_probability)
        self.end_probability = float(end_probability)
        self.heartbeat = int(heartbeat or 0)
        self.on_restart = on_restart

    def snapshot(self) -> MatchPhase:
        with self._lock:
            return self._phase

    def tick(self) -> bool:
        """Run one clock step. Returns True when the phase changed."""
        with self._lock:
            phase = self._phase
            if not phase.in_progress or not phase.simulation_enabled:
                return False
            if self.rng.random() >= self.advance_probability:
                return False
            if phase.quarter < QUARTERS:
                self._phase = replace(phase, quarter=phase.quarter + 1, time_remaining_label=QUARTER_LENGTH_LABEL)
            elif self.rng.random() < self.end_probability:
                self._phase = replace(phase, in_progress=False, time_remaining_label=FINAL_LABEL)
            else:
                return False
            new_phase = self._phase
        logger.info(
            f"[clock-tick] quarter={new_phase.quarter} time={new_phase.time_remaining_label} in_progress={new_phase.in_progress}"
        )
        return True

    def toggle_simulation(self) -> bool:
        with self._lock:
            self._phase = replace(self._phase, simulation_enabled=not self._phase.simulation_enabled)
            enabled = self._phase.simulation_enabled
        logger.info(f"[simulation-toggle] enabled={enabled}")
        return enabled

    def restart(self) -> MatchPhase:
        with self._lock:
            phase = replace(
                self._phase, quarter=1, time_remaining_label=QUARTER_LENGTH_LABEL, in_progress=True
            )
            # Entities reset under the phase lock; the phase only moves once that succeeded
            if self.on_restart is not None:
                self.on_restart()
            self._phase = phase
        logger.info(f"[match-restart] quarter={phase.quarter} time={phase.time_remaining_label}")
        return phase

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def _wait(self, delay: float) -> bool:
        """Sleep ``delay`` seconds; True if stop was requested meanwhile."""
        hb = self.heartbeat
        if not hb or hb <= 0:
            return self._stop.wait(delay)
        slept = 0.0
        while slept < delay:
            step = min(hb, delay - slept)
            if self._stop.wait(step):
                return True
            slept += step
            logger.info(f"[clock-heartbeat] remaining={max(0.0, delay - slept):.0f}s")
        return False

    def run(self, on_change: Optional[Callable[[MatchPhase], None]] = None) -> None:
        """Tick every ``tick_interval`` seconds until ``stop`` is called."""
        logger.info(f"[clock-start] interval={self.tick_interval}s")
        while not self._wait(self.tick_interval):
            started = time.monotonic()
            try:
                changed = self.tick()
                if changed and on_change is not None:
                    on_change(self.snapshot())
            except Exception:
                logger.exception("[clock-error] tick failed; continuing")
                continue
            logger.debug(f"[clock-tick-done] changed={changed} took={time.monotonic() - started:.4f}s")
        logger.info("[clock-stop]")
