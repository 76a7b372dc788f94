from __future__ import annotations

import math
from numbers import Real
from typing import Sequence

from .config import (
    BURST_MIN,
    BURST_SPAN,
    LAST_INDEX,
    QUIET_SLICE_PROBABILITY,
    SPIKE_COUNT,
    SPIKE_MIN,
    SPIKE_SPAN,
    TOTAL_TICKS,
)

Series = tuple[float, ...]

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619


class InvalidInput(ValueError):
    pass


class GenerationFailure(RuntimeError):
    pass


def fnv1a(text: str) -> int:
    h = _FNV_OFFSET
    for ch in text:
        h ^= ord(ch)
        h = (h * _FNV_PRIME) & _MASK32
    return h


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class Mulberry32:
    def __init__(self, seed: int) -> None:
        self._state = seed & _MASK32

    def next_uint32(self) -> int:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        return self.next_uint32() / 4294967296.0


def _validate(seed: object, final_total: object) -> float:
    if not isinstance(seed, str) or not seed:
        raise InvalidInput("seed must be a non-empty string")
    if isinstance(final_total, bool) or not isinstance(final_total, Real):
        raise InvalidInput(f"final total must be a number, got {final_total!r}")
    total = float(final_total)
    if not math.isfinite(total):
        raise InvalidInput(f"final total must be finite, got {total}")
    if total < 0:
        raise InvalidInput(f"final total must be non-negative, got {total}")
    return total


def _increments(rng: Mulberry32) -> list[float]:
    incs = [0.0] * TOTAL_TICKS
    for i in range(1, TOTAL_TICKS):
        # Most 10-minute slices are quiet; the rest carry a small burst.
        if rng.random() < QUIET_SLICE_PROBABILITY:
            continue
        incs[i] = BURST_MIN + rng.random() * BURST_SPAN
    for _ in range(SPIKE_COUNT):
        j = 1 + int(rng.random() * LAST_INDEX)
        incs[j] += SPIKE_MIN + rng.random() * SPIKE_SPAN
    return incs


def generate_series(seed: str, final_total: float) -> Series:
    total = _validate(seed, final_total)
    final = round(total, 1)
    incs = _increments(Mulberry32(fnv1a(seed)))

    weight_sum = sum(incs)
    if weight_sum == 0:
        incs = [0.0] * TOTAL_TICKS
        incs[LAST_INDEX] = total
    else:
        scale = total / weight_sum
        incs = [inc * scale for inc in incs]

    series = [0.0] * TOTAL_TICKS
    cumulative = 0.0
    for i in range(1, TOTAL_TICKS):
        cumulative += incs[i]
        series[i] = max(round(cumulative, 1), series[i - 1])

    # Pin the last point; anything above it was float drift and comes down to it.
    series[LAST_INDEX] = final
    for i in range(LAST_INDEX - 1, -1, -1):
        if series[i] > final:
            series[i] = final
    return tuple(series)


def side_seeds(team1: str, team2: str) -> tuple[str, str]:
    return f"{team1}-{team2}-t1", f"{team1}-{team2}-t2"


def mask_future(series: Sequence[float], last_index: int) -> list[float | None]:
    return [value if idx <= last_index else None for idx, value in enumerate(series)]
