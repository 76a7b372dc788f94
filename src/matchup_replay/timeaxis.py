from __future__ import annotations

from .config import LAST_INDEX, MINUTES_PER_TICK, START_HOUR_ET, TICKS_PER_HOUR

HOUR_LABEL_INDICES: tuple[int, ...] = tuple(range(0, LAST_INDEX + 1, TICKS_PER_HOUR))


def _clock(index: int) -> tuple[int, int]:
    if not 0 <= index <= LAST_INDEX:
        raise ValueError(f"tick index must be within 0..{LAST_INDEX}, got {index}")
    minutes = index * MINUTES_PER_TICK
    return START_HOUR_ET + minutes // 60, minutes % 60


def _hour12(hour24: int) -> int:
    return ((hour24 + 11) % 12) + 1


def fmt_hour_label(index: int) -> str:
    hour24, _minute = _clock(index)
    suffix = "p" if 12 <= hour24 < 24 else "a"
    return f"{_hour12(hour24)}{suffix}"


def fmt_tick_time(index: int) -> str:
    hour24, minute = _clock(index)
    suffix = "PM" if 12 <= hour24 < 24 else "AM"
    return f"{_hour12(hour24)}:{minute:02d} {suffix} ET"


def hour_labels() -> list[dict[str, object]]:
    return [{"index": idx, "label": fmt_hour_label(idx)} for idx in HOUR_LABEL_INDICES]
