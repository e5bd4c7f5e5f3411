"""
Type inference for introspected columns and tables.

Maps declared SQL types onto base type tags, column names onto special type
tags, and table names/columns onto entity type tags, so that a raw database
can be matched against rules without hand-written metadata.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from autodash.taxonomy import GENERIC_TABLE

# Ordered: first match wins, so longer type names come before their prefixes.
_BASE_TYPE_PATTERNS: list[tuple[str, str]] = [
    (r"^BOOL", "type/Boolean"),
    (r"^TIMESTAMP", "type/DateTime"),
    (r"^DATETIME", "type/DateTime"),
    (r"^DATE$", "type/Date"),
    (r"^TIME", "type/Time"),
    (r"^INTERVAL", "type/*"),
    (r"^(BIGINT|HUGEINT|UBIGINT|INT8|LONG)", "type/BigInteger"),
    (r"^(INTEGER|INT|SMALLINT|TINYINT|UINTEGER|USMALLINT|UTINYINT)", "type/Integer"),
    (r"^(DECIMAL|NUMERIC)", "type/Decimal"),
    (r"^(DOUBLE|FLOAT|REAL)", "type/Float"),
    (r"^(VARCHAR|TEXT|CHAR|STRING|BPCHAR|UUID)", "type/Text"),
]

_NUMERIC = {"type/Integer", "type/BigInteger", "type/Decimal", "type/Float"}
_TEMPORAL = {"type/DateTime", "type/Date", "type/Time"}
_TEXT = {"type/Text"}

# (pattern on lower-cased column name, special type, base types it applies to; None = any)
_SPECIAL_TYPE_PATTERNS: list[tuple[str, str, set[str] | None]] = [
    (r"(^|_)(created|creation)(_at|_on|_date|_time)?$", "type/CreationTimestamp", _TEMPORAL),
    (r"(^|_)(joined|signup|signed_up|registered)(_at|_on|_date)?$", "type/JoinTimestamp", _TEMPORAL),
    (r"birth", "type/Birthdate", _TEMPORAL),
    (r"e_?mail", "type/Email", None),
    (r"(^|_)(url|website|homepage)$", "type/URL", None),
    (r"(^|_)country(_code)?$", "type/Country", None),
    (r"(^|_)(state|province|region)$", "type/State", None),
    (r"(^|_)city$", "type/City", None),
    (r"(^|_)(zip|zip_code|postal_code|postcode)$", "type/ZipCode", None),
    (r"(^|_)(lat|latitude)$", "type/Latitude", _NUMERIC),
    (r"(^|_)(lng|lon|long|longitude)$", "type/Longitude", _NUMERIC),
    (r"discount", "type/Discount", _NUMERIC),
    (r"price", "type/Price", _NUMERIC),
    (r"(cost|fee|charge)", "type/Cost", _NUMERIC),
    (r"(amount|revenue|income|total|payment|subtotal)", "type/Income", _NUMERIC),
    (r"(quantity|qty)", "type/Quantity", _NUMERIC),
    (r"(score|rating)", "type/Score", _NUMERIC),
    (r"(^|_)title$", "type/Title", _TEXT),
    (r"(^|_)name$", "type/Name", _TEXT),
    (r"(description|comment|notes)", "type/Description", _TEXT),
    (r"(source|referrer|channel|utm_)", "type/Source", _TEXT),
    (r"(status|category|(^|_)type$|segment|tier|plan)", "type/Category", _TEXT),
]

# Table-name keywords, most specific first.
_ENTITY_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("subscription",), "entity/SubscriptionTable"),
    (("transaction", "order", "payment", "invoice", "sale", "purchase", "booking"), "entity/TransactionTable"),
    (("product", "item", "sku", "catalog"), "entity/ProductTable"),
    (("event", "log", "activity", "session", "pageview"), "entity/EventTable"),
    (("company", "companies", "organization", "organisation", "vendor", "supplier"), "entity/CompanyTable"),
    (("user", "customer", "account", "member", "person", "people", "client"), "entity/UserTable"),
]


def base_type_for(declared_type: str) -> str:
    """Map a declared SQL type (e.g. ``VARCHAR``, ``DECIMAL(18,3)``) to a base type tag."""
    type_upper = declared_type.strip().upper()
    for pattern, tag in _BASE_TYPE_PATTERNS:
        if re.match(pattern, type_upper):
            return tag
    return "type/*"


def special_type_for(
    column_name: str,
    base_type: str,
    *,
    is_primary_key: bool = False,
    is_foreign_key: bool = False,
) -> str | None:
    """Infer a special type tag from key constraints and the column name."""
    if is_primary_key:
        return "type/PK"
    if is_foreign_key:
        return "type/FK"

    col_lower = column_name.lower()
    for pattern, tag, base_types in _SPECIAL_TYPE_PATTERNS:
        if base_types is not None and base_type not in base_types:
            continue
        if re.search(pattern, col_lower):
            return tag
    return None


def entity_type_for(table_name: str, column_names: Sequence[str] = ()) -> str:
    """Infer a table's entity type from its name, falling back to its columns."""
    name_lower = table_name.lower()
    for keywords, tag in _ENTITY_KEYWORDS:
        if any(k in name_lower for k in keywords):
            return tag

    cols = {c.lower() for c in column_names}
    if any(c.startswith("ga:") for c in cols):
        return "entity/GoogleAnalyticsTable"
    if "transaction_id" in cols or "order_id" in cols:
        return "entity/TransactionTable"
    if "email" in cols:
        return "entity/UserTable"

    return GENERIC_TABLE


def display_name_for(name: str) -> str:
    """``created_at`` -> ``Created At``."""
    words = re.split(r"[_\s]+", name.strip())
    return " ".join(w.capitalize() for w in words if w)
