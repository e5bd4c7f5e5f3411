"""Rule schema definitions using Pydantic."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from autodash.rules.forms import MAX_SCORE
from autodash.taxonomy import normalize_field_type, normalize_table_type


class DimensionSpec(BaseModel):
    """A named dimension a rule wants bound to fields.

    ``field_type`` is either a type tag or a literal special name. When
    ``table_type`` is set the fields are looked up on a linked table of that
    entity type instead of the root table.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    field_type: str
    table_type: str | None = None
    score: float = Field(MAX_SCORE, ge=0, le=MAX_SCORE)

    @model_validator(mode="before")
    @classmethod
    def split_table_field_pair(cls, data: Any) -> Any:
        """Accept ``field_type: [TableType, FieldType]`` as written in rule files."""
        if isinstance(data, dict) and isinstance(data.get("field_type"), (list, tuple)):
            pair = list(data["field_type"])
            if len(pair) == 1:
                return {**data, "field_type": pair[0]}
            if len(pair) == 2:
                return {**data, "table_type": pair[0], "field_type": pair[1]}
            raise ValueError(f"field_type must be a tag or a [table_type, field_type] pair, got {pair}")
        return data

    @field_validator("field_type")
    @classmethod
    def normalize_field(cls, v: str) -> str:
        return normalize_field_type(v)

    @field_validator("table_type")
    @classmethod
    def normalize_table(cls, v: str | None) -> str | None:
        return normalize_table_type(v) if v else None


class OverloadedDefinition(BaseModel):
    """One scored alternative for a metric or filter identifier."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    form: Any
    score: float = Field(MAX_SCORE, ge=0, le=MAX_SCORE)


class CardTemplate(BaseModel):
    """A parametrized query blueprint within a rule."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    title: str | None = None
    description: str | None = None
    visualization: Any = None
    metrics: list[str] = Field(default_factory=list)
    filters: list[str] = Field(default_factory=list)
    dimensions: list[str] = Field(default_factory=list)
    score: float = Field(MAX_SCORE, ge=0)
    limit: int | None = Field(None, gt=0)
    order_by: Any = None


class Rule(BaseModel):
    """A domain heuristic applicable to tables of ``table_type``."""

    model_config = ConfigDict(frozen=True)

    table_type: str
    title: str
    description: str | None = None
    dimensions: list[DimensionSpec] = Field(default_factory=list)
    metrics: list[OverloadedDefinition] = Field(default_factory=list)
    filters: list[OverloadedDefinition] = Field(default_factory=list)
    cards: list[CardTemplate] = Field(default_factory=list)
    source: str | None = Field(None, description="File the rule was loaded from")

    @field_validator("table_type")
    @classmethod
    def normalize_table(cls, v: str) -> str:
        return normalize_table_type(v)
