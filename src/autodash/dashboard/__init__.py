"""Dashboard assembly and creation."""

from autodash.dashboard.assembler import build_dashboard, generate_cards, rank_cards
from autodash.dashboard.sink import (
    Dashboard,
    DashboardSink,
    InMemoryDashboardSink,
    JsonDashboardSink,
    load_dashboard,
    load_index,
)

__all__ = [
    "Dashboard",
    "DashboardSink",
    "InMemoryDashboardSink",
    "JsonDashboardSink",
    "build_dashboard",
    "generate_cards",
    "load_dashboard",
    "load_index",
    "rank_cards",
]
