"""Type taxonomy for field types and table entity types.

Tags are plain strings arranged in a directed acyclic "is-a" relation:
``type/Income`` is a ``type/Currency`` which is a ``type/Number``. Entity
types attached to tables live in the ``entity/`` namespace.

Rules may also name a field by a literal special dimension name (Google
Analytics style ``ga:`` names). Those match by exact field name and are
never compared against the hierarchy.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

GENERIC_TABLE = "entity/GenericTable"
SPECIAL_NAME_PREFIX = "ga:"

# child -> parents
DEFAULT_HIERARCHY: dict[str, tuple[str, ...]] = {
    # Base types
    "type/Number": ("type/*",),
    "type/Integer": ("type/Number",),
    "type/BigInteger": ("type/Integer",),
    "type/Float": ("type/Number",),
    "type/Decimal": ("type/Float",),
    "type/Text": ("type/*",),
    "type/Boolean": ("type/*",),
    "type/Temporal": ("type/*",),
    "type/Date": ("type/Temporal",),
    "type/Time": ("type/Temporal",),
    "type/DateTime": ("type/Temporal",),
    # Special types
    "type/Special": ("type/*",),
    "type/PK": ("type/Special",),
    "type/FK": ("type/Special",),
    "type/Category": ("type/Special",),
    "type/Name": ("type/Category",),
    "type/Title": ("type/Category",),
    "type/Source": ("type/Category",),
    "type/Address": ("type/*",),
    "type/Country": ("type/Address", "type/Category"),
    "type/State": ("type/Address", "type/Category"),
    "type/City": ("type/Address", "type/Category"),
    "type/ZipCode": ("type/Address",),
    "type/Coordinate": ("type/Float",),
    "type/Latitude": ("type/Coordinate",),
    "type/Longitude": ("type/Coordinate",),
    "type/Quantity": ("type/Integer",),
    "type/Score": ("type/Number",),
    "type/Currency": ("type/Number",),
    "type/Income": ("type/Currency",),
    "type/Discount": ("type/Currency",),
    "type/Price": ("type/Currency",),
    "type/Cost": ("type/Currency",),
    "type/Email": ("type/Text",),
    "type/URL": ("type/Text",),
    "type/Description": ("type/Text",),
    "type/CreationTimestamp": ("type/DateTime",),
    "type/JoinTimestamp": ("type/DateTime",),
    "type/Birthdate": ("type/Date",),
    # Entity types
    "entity/GenericTable": ("entity/*",),
    "entity/UserTable": ("entity/GenericTable",),
    "entity/CompanyTable": ("entity/GenericTable",),
    "entity/ProductTable": ("entity/GenericTable",),
    "entity/EventTable": ("entity/GenericTable",),
    "entity/TransactionTable": ("entity/GenericTable",),
    "entity/SubscriptionTable": ("entity/TransactionTable",),
    "entity/GoogleAnalyticsTable": ("entity/GenericTable",),
}


def is_special_name(spec: object) -> bool:
    """Whether a field type spec is a literal special dimension name."""
    return isinstance(spec, str) and spec.startswith(SPECIAL_NAME_PREFIX)


def _namespaced(tag: str, namespace: str) -> str:
    if is_special_name(tag) or "/" in tag:
        return tag
    return f"{namespace}/{tag}"


def normalize_field_type(tag: str) -> str:
    """``DateTime`` -> ``type/DateTime``; namespaced tags and special names pass through."""
    return _namespaced(tag, "type")


def normalize_table_type(tag: str) -> str:
    """``TransactionTable`` -> ``entity/TransactionTable``."""
    return _namespaced(tag, "entity")


class TypeTaxonomy:
    """An immutable is-a relation over type tags."""

    def __init__(self, hierarchy: Mapping[str, Iterable[str]] | None = None):
        self._parents: dict[str, tuple[str, ...]] = {
            child: tuple(parents) for child, parents in (hierarchy or {}).items()
        }
        self._ancestors: dict[str, frozenset[str]] = {}

    def derive(self, child: str, *parents: str) -> "TypeTaxonomy":
        """Return a new taxonomy with ``child`` added under ``parents``."""
        merged = dict(self._parents)
        merged[child] = tuple(dict.fromkeys(merged.get(child, ()) + parents))
        return TypeTaxonomy(merged)

    def parents(self, tag: str) -> tuple[str, ...]:
        return self._parents.get(tag, ())

    def ancestors(self, tag: str) -> frozenset[str]:
        """All transitive ancestors of ``tag``, excluding ``tag`` itself."""
        cached = self._ancestors.get(tag)
        if cached is not None:
            return cached

        seen: set[str] = set()
        stack = list(self.parents(tag))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.parents(current))

        result = frozenset(seen)
        self._ancestors[tag] = result
        return result

    def ancestor_chain_length(self, tag: str) -> int:
        """Number of ancestors of ``tag``; longer means more specific."""
        return len(self.ancestors(tag))

    def is_subtype(self, tag: str | None, ancestor: str | None) -> bool:
        """Reflexive, transitive is-a check. ``None`` is never a subtype."""
        if tag is None or ancestor is None:
            return False
        return tag == ancestor or ancestor in self.ancestors(tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._parents

    def __repr__(self) -> str:
        return f"TypeTaxonomy({len(self._parents)} tags)"


def default_taxonomy() -> TypeTaxonomy:
    """The built-in hierarchy of base, special and entity types."""
    return TypeTaxonomy(DEFAULT_HIERARCHY)
