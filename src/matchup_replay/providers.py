from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol

logger = logging.getLogger(__name__)


class ProjectionProvider(Protocol):
    source: str
    ttl_seconds: float
    is_enabled: bool

    def fetch_weekly(self, player_ids: list[str], week: int) -> dict[str, float]:
        ...


class MockProjectionProvider:
    source = "Mock"
    ttl_seconds = 3600.0

    def __init__(self, is_enabled: bool = False) -> None:
        self.is_enabled = is_enabled

    def fetch_weekly(self, player_ids: list[str], week: int) -> dict[str, float]:
        return {pid: 10.0 + idx for idx, pid in enumerate(player_ids)}


def merge_projections(
    players: Iterable[Mapping[str, Any]],
    provider: ProjectionProvider,
    week: int,
) -> list[dict[str, Any]]:
    rows = [dict(p) for p in players]
    if not provider.is_enabled:
        return rows
    try:
        projections = provider.fetch_weekly([str(row["player_id"]) for row in rows], week)
    except Exception as exc:
        logger.warning("Projection provider %s failed: %s", provider.source, exc)
        return rows
    for row in rows:
        row["projection"] = projections.get(str(row["player_id"]))
        row["source"] = provider.source
    return rows
