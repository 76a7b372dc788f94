from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .config import DEFAULT_TICK_SECONDS, LAST_INDEX
from .scheduler import Scheduler, ThreadingScheduler
from .series import GenerationFailure, InvalidInput, Series, generate_series, mask_future
from .timeaxis import fmt_tick_time, hour_labels

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADED = "loaded"
    PLAYING = "playing"


@dataclass(frozen=True, slots=True)
class SideSelection:
    seed: str
    total: float


class PlaybackController:
    def __init__(self, scheduler: Scheduler | None = None, tick_seconds: float = DEFAULT_TICK_SECONDS) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self.scheduler: Scheduler = scheduler or ThreadingScheduler()
        self.tick_seconds = float(tick_seconds)
        self.state = PlaybackState.IDLE
        self.reveal_index = LAST_INDEX
        self.last_error: str = ""
        self._sides: tuple[SideSelection, SideSelection] | None = None
        self._series: tuple[Series, Series] | None = None
        # Bumped on every stop, restart or switch; ticks from an older epoch are ignored.
        self._epoch = 0
        self._pending: Any = None
        self._lock = threading.RLock()

    @property
    def series(self) -> tuple[Series, Series] | None:
        return self._series

    @property
    def is_loaded(self) -> bool:
        return self._series is not None

    @staticmethod
    def _generate_pair(a: SideSelection, b: SideSelection) -> tuple[Series, Series]:
        return generate_series(a.seed, a.total), generate_series(b.seed, b.total)

    def select_matchup(self, seed_a: str, total_a: float, seed_b: str, total_b: float) -> None:
        sides = (SideSelection(seed_a, total_a), SideSelection(seed_b, total_b))
        with self._lock:
            try:
                pair = self._generate_pair(*sides)
            except InvalidInput as exc:
                self.last_error = f"Could not generate series for {seed_a!r} / {seed_b!r}: {exc}"
                logger.warning(self.last_error)
                raise GenerationFailure(self.last_error) from exc
            self._stop_locked()
            self._sides = sides
            self._series = pair
            self.reveal_index = LAST_INDEX
            self.state = PlaybackState.LOADED
            self.last_error = ""
            logger.debug("Selected matchup %s vs %s", seed_a, seed_b)

    def clear(self) -> None:
        with self._lock:
            self._stop_locked()
            self._sides = None
            self._series = None
            self.reveal_index = LAST_INDEX
            self.state = PlaybackState.IDLE

    def restart_day(self) -> None:
        with self._lock:
            if self._sides is None:
                logger.debug("restart_day ignored: no matchup selected")
                return
            # Deterministic, so the regenerated pair matches the stored one.
            self._series = self._generate_pair(*self._sides)
            self.reveal_index = 0
            if self.state is PlaybackState.PLAYING:
                self._epoch += 1
                self._cancel_pending_locked()
                self._schedule_tick_locked()

    def step_forward(self) -> int:
        with self._lock:
            if self._series is not None and self.reveal_index < LAST_INDEX:
                self.reveal_index += 1
            return self.reveal_index

    def set_auto_advance(self, enabled: bool) -> bool:
        with self._lock:
            if not enabled:
                self._stop_locked()
                return False
            if self.state is PlaybackState.PLAYING:
                return True
            if self._series is None or self.reveal_index >= LAST_INDEX:
                return False
            self.state = PlaybackState.PLAYING
            self._epoch += 1
            self._schedule_tick_locked()
            return True

    def _schedule_tick_locked(self) -> None:
        epoch = self._epoch
        self._pending = self.scheduler.schedule(self.tick_seconds, lambda: self._on_tick(epoch))

    def _cancel_pending_locked(self) -> None:
        if self._pending is not None:
            self.scheduler.cancel(self._pending)
            self._pending = None

    def _stop_locked(self) -> None:
        self._epoch += 1
        self._cancel_pending_locked()
        if self.state is PlaybackState.PLAYING:
            self.state = PlaybackState.LOADED

    def _on_tick(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch or self.state is not PlaybackState.PLAYING:
                logger.debug("Dropped stale tick for epoch %s", epoch)
                return
            self._pending = None
            self.step_forward()
            if self.reveal_index >= LAST_INDEX:
                self._stop_locked()
                return
            self._schedule_tick_locked()

    def visible_series(self) -> tuple[Series | list[float | None], Series | list[float | None]] | None:
        with self._lock:
            if self._series is None:
                return None
            home, away = self._series
            if self.reveal_index >= LAST_INDEX:
                return home, away
            return mask_future(home, self.reveal_index), mask_future(away, self.reveal_index)

    def current_time_label(self) -> str:
        return fmt_tick_time(self.reveal_index)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            visible = self.visible_series()
            return {
                "state": self.state.value,
                "reveal_index": self.reveal_index,
                "time": self.current_time_label(),
                "hour_ticks": hour_labels(),
                "home": list(visible[0]) if visible else None,
                "away": list(visible[1]) if visible else None,
                "last_error": self.last_error,
            }
