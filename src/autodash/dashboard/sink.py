"""Dashboard creation: models, the sink interface and two sinks."""

from __future__ import annotations

import json
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field

from autodash.heuristics.candidates import CardCandidate


class Dashboard(BaseModel):
    """A created dashboard and its ordered cards."""

    id: str
    title: str
    description: str | None = None
    cards: list[dict[str, Any]] = Field(default_factory=list)
    created_at: str


class DashboardIndex(BaseModel):
    """Index of all dashboards in a directory."""

    dashboards: list[dict[str, Any]] = Field(default_factory=list)


class DashboardSink(Protocol):
    def create_dashboard(
        self, title: str, description: str | None, cards: Sequence[CardCandidate]
    ) -> Dashboard: ...


def make_dashboard(title: str, description: str | None, cards: Sequence[CardCandidate]) -> Dashboard:
    return Dashboard(
        id=uuid.uuid4().hex[:12],
        title=title,
        description=description,
        cards=[
            {"position": position, **card.model_dump(mode="json")}
            for position, card in enumerate(cards)
        ],
        created_at=datetime.now(timezone.utc).isoformat(),
    )


class InMemoryDashboardSink:
    """Keeps created dashboards in a dict keyed by id."""

    def __init__(self) -> None:
        self.dashboards: dict[str, Dashboard] = {}

    def create_dashboard(
        self, title: str, description: str | None, cards: Sequence[CardCandidate]
    ) -> Dashboard:
        dashboard = make_dashboard(title, description, cards)
        self.dashboards[dashboard.id] = dashboard
        return dashboard


class JsonDashboardSink:
    """Writes each dashboard as ``<id>.json`` and keeps ``index.json`` up to date."""

    def __init__(self, out_dir: Path | str):
        self.out_dir = Path(out_dir)

    def create_dashboard(
        self, title: str, description: str | None, cards: Sequence[CardCandidate]
    ) -> Dashboard:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        dashboard = make_dashboard(title, description, cards)

        dashboard_path = self.out_dir / f"{dashboard.id}.json"
        with open(dashboard_path, "w") as f:
            json.dump(dashboard.model_dump(), f, indent=2)

        index = load_index(self.out_dir) or DashboardIndex()
        index.dashboards.append(
            {
                "id": dashboard.id,
                "title": dashboard.title,
                "card_count": len(dashboard.cards),
                "created_at": dashboard.created_at,
                "path": dashboard_path.name,
            }
        )
        with open(self.out_dir / "index.json", "w") as f:
            json.dump(index.model_dump(), f, indent=2)

        return dashboard


def load_dashboard(dashboard_id: str, out_dir: Path) -> Dashboard | None:
    """Load a dashboard by ID."""
    dashboard_path = out_dir / f"{dashboard_id}.json"
    if not dashboard_path.exists():
        return None

    with open(dashboard_path) as f:
        return Dashboard(**json.load(f))


def load_index(out_dir: Path) -> DashboardIndex | None:
    """Load the dashboard index."""
    index_path = out_dir / "index.json"
    if not index_path.exists():
        return None

    with open(index_path) as f:
        return DashboardIndex(**json.load(f))
