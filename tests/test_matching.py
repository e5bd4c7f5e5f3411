"""Tests for field matching on the root table and across linked tables."""

from __future__ import annotations

from autodash.heuristics.context import base_context
from autodash.heuristics.matching import (
    field_candidates,
    find_linked_tables,
    match_fields,
    match_fields_across,
)
from autodash.metadata.models import FieldMetadata, LinkedTable, TableMetadata
from autodash.metadata.store import InMemoryMetadataStore
from conftest import ORDERS, SHOP_FIELDS, make_field


def _names(fields):
    return [f.name for f in fields]


class TestMatchFields:
    def test_matches_base_type_subtypes(self, taxonomy):
        """DateTime matches both timestamp columns, in field order."""
        orders_fields = [f for f in SHOP_FIELDS if f.table_id == ORDERS]
        assert _names(match_fields("type/DateTime", orders_fields, taxonomy)) == [
            "created_at",
            "shipped_at",
        ]

    def test_matches_special_type(self, taxonomy):
        orders_fields = [f for f in SHOP_FIELDS if f.table_id == ORDERS]
        assert _names(match_fields("type/CreationTimestamp", orders_fields, taxonomy)) == ["created_at"]
        assert _names(match_fields("type/Income", orders_fields, taxonomy)) == ["total"]
        assert _names(match_fields("type/Currency", orders_fields, taxonomy)) == ["total", "discount"]

    def test_number_matches_numeric_base_types(self, taxonomy):
        orders_fields = [f for f in SHOP_FIELDS if f.table_id == ORDERS]
        assert _names(match_fields("type/Number", orders_fields, taxonomy)) == [
            "id",
            "total",
            "user_id",
            "product_id",
            "discount",
        ]

    def test_special_name_matches_by_exact_name(self, taxonomy):
        fields = [
            make_field(1, 9, "ga:country", "type/Text"),
            make_field(2, 9, "ga:city", "type/Text"),
        ]
        assert _names(match_fields("ga:country", fields, taxonomy)) == ["ga:country"]
        assert match_fields("ga:region", fields, taxonomy) == []

    def test_no_match(self, taxonomy):
        orders_fields = [f for f in SHOP_FIELDS if f.table_id == ORDERS]
        assert match_fields("type/Latitude", orders_fields, taxonomy) == []


class TestLinkedTables:
    def test_linked_tables_in_fk_order(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        assert [(lt.table.name, lt.via_fk_field_id) for lt in context.linked_tables] == [
            ("Users", 14),
            ("Products", 15),
        ]

    def test_find_linked_tables_by_entity_type(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        assert [lt.table.name for lt in find_linked_tables("entity/UserTable", context)] == ["Users"]
        assert [lt.table.name for lt in find_linked_tables("entity/GenericTable", context)] == [
            "Users",
            "Products",
        ]
        assert find_linked_tables("entity/EventTable", context) == []

    def test_match_across_sets_link(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        matched = match_fields_across("entity/UserTable", "type/Country", context)

        assert len(matched) == 1
        assert matched[0].id == 21
        assert matched[0].link == 14
        # the stored metadata is not modified
        assert shop_store.get_field(21).link is None

    def test_match_across_uses_first_linked_table_only(self, taxonomy):
        """Two linked user tables: only the first one is searched."""
        tables = [
            TableMetadata(id=1, name="Orders", db_id=1, entity_type="entity/TransactionTable"),
            TableMetadata(id=2, name="Buyers", db_id=1, entity_type="entity/UserTable"),
            TableMetadata(id=3, name="Sellers", db_id=1, entity_type="entity/UserTable"),
        ]
        fields = [
            make_field(10, 1, "buyer_id", "type/Integer", "type/FK", fk_target_field_id=20),
            make_field(11, 1, "seller_id", "type/Integer", "type/FK", fk_target_field_id=30),
            make_field(20, 2, "id", "type/Integer", "type/PK"),
            make_field(21, 2, "country", "type/Text", "type/Country"),
            make_field(30, 3, "id", "type/Integer", "type/PK"),
            make_field(31, 3, "country", "type/Text", "type/Country"),
        ]
        store = InMemoryMetadataStore(tables, fields)
        context = base_context(tables[0], store=store, taxonomy=taxonomy)

        matched = match_fields_across("entity/UserTable", "type/Country", context)
        assert [(f.id, f.link) for f in matched] == [(21, 10)]

    def test_match_across_without_linked_table(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        assert match_fields_across("entity/EventTable", "type/Country", context) == []


class TestFieldCandidates:
    def test_root_table_without_table_type(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        assert _names(field_candidates(context, "type/Discount")) == ["discount"]

    def test_root_table_fields_never_come_from_linked_tables(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        assert field_candidates(context, "type/Country") == []

    def test_linked_table_with_table_type(self, shop_store, orders):
        context = base_context(orders, store=shop_store)
        matched = field_candidates(context, "type/Category", "entity/ProductTable")
        assert [(f.name, f.link) for f in matched] == [("category", 15)]


def test_linked_table_dataclass_is_hashable():
    table = TableMetadata(id=2, name="Users", db_id=1, entity_type="entity/UserTable")
    assert LinkedTable(table, 14) == LinkedTable(table, 14)
    assert len({LinkedTable(table, 14), LinkedTable(table, 14)}) == 1
    assert FieldMetadata(1, 1, "a", "type/Text") == FieldMetadata(1, 1, "a", "type/Text")
