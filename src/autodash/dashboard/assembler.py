"""Automatically generate dashboards for a table using rule heuristics."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence

from autodash.dashboard.sink import DashboardSink
from autodash.heuristics.candidates import CardCandidate, generate_candidates
from autodash.heuristics.context import Context, build_context
from autodash.heuristics.selection import select_rule
from autodash.metadata.models import TableMetadata
from autodash.metadata.store import MetadataStore
from autodash.rules.schemas import Rule
from autodash.safety.permissions import PermissionSet
from autodash.taxonomy import TypeTaxonomy, default_taxonomy

logger = logging.getLogger(__name__)


def candidate_groups(
    context: Context,
    rule: Rule,
    *,
    permissions: PermissionSet,
    max_candidates: int | None = None,
) -> dict[str, list[CardCandidate]]:
    """Candidates per card identifier.

    Templates producing no candidate contribute nothing. If two templates
    share an identifier, the group with the higher best score is kept (the
    first one on a tie).
    """
    groups: dict[str, list[CardCandidate]] = {}
    for template in rule.cards:
        candidates = list(
            generate_candidates(context, template, permissions=permissions, max_candidates=max_candidates)
        )
        if not candidates:
            logger.debug("Card %s produced no candidates", template.identifier)
            continue
        current = groups.get(template.identifier)
        if current is None or max(c.score for c in candidates) > max(c.score for c in current):
            groups[template.identifier] = candidates
    return groups


def rank_cards(groups: Mapping[str, Sequence[CardCandidate]]) -> list[CardCandidate]:
    """Flatten groups in rule order, then order by score (highest first, stable)."""
    flat = [card for cards in groups.values() for card in cards]
    return sorted(flat, key=lambda c: c.score, reverse=True)


def generate_cards(
    root_table: TableMetadata,
    rules: Sequence[Rule],
    *,
    store: MetadataStore,
    permissions: PermissionSet,
    taxonomy: TypeTaxonomy | None = None,
    max_candidates: int | None = None,
) -> tuple[Rule | None, list[CardCandidate]]:
    """Select a rule for ``root_table`` and return it with the ranked cards it yields.

    Returns ``(None, [])`` without touching ``store`` when no rule applies.
    """
    taxonomy = taxonomy or default_taxonomy()
    rule = select_rule(rules, root_table, taxonomy)
    if rule is None:
        logger.info("No heuristic applies to table %s (%s)", root_table.name, root_table.entity_type)
        return None, []

    context = build_context(root_table, rule, store=store, taxonomy=taxonomy)

    logger.info("Applying heuristic %s to table %s.", rule.table_type, root_table.name)
    summary = context.summary()
    logger.info("Linked tables: %s", ", ".join(summary["linked_tables"]) or "none")
    logger.info("Dimensions bindings:\n%s", json.dumps(summary["dimensions"], indent=2))
    logger.info(
        "Overloaded definitions:\nMetrics:\n%s\nFilters:\n%s",
        json.dumps(summary["metrics"], indent=2),
        json.dumps(summary["filters"], indent=2),
    )

    groups = candidate_groups(context, rule, permissions=permissions, max_candidates=max_candidates)
    return rule, rank_cards(groups)


def build_dashboard(
    root_table: TableMetadata,
    rules: Sequence[Rule],
    *,
    store: MetadataStore,
    sink: DashboardSink,
    permissions: PermissionSet,
    taxonomy: TypeTaxonomy | None = None,
    max_candidates: int | None = None,
) -> str | None:
    """Create a dashboard for ``root_table`` using the best matching heuristic.

    Returns the id of the created dashboard, or None when no rule applies or
    no card survived binding and permission checks.
    """
    rule, cards = generate_cards(
        root_table,
        rules,
        store=store,
        permissions=permissions,
        taxonomy=taxonomy,
        max_candidates=max_candidates,
    )
    if rule is None or not cards:
        return None

    dashboard = sink.create_dashboard(rule.title, rule.description, cards)
    logger.info("Created dashboard %s with %d cards for table %s", dashboard.id, len(cards), root_table.name)
    return dashboard.id
