"""Relation records and the bundle that carries them.

A relation pairs condition records with addition records: when the
condition matches collected evidence, the addition's authority and
profile context applies.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from coserv_store.models.ect import Ect


class RvRelation(BaseModel):
    """Reference-value relation: one condition, one addition."""

    model_config = {"extra": "forbid", "frozen": True}

    condition: Ect
    addition: Ect


class EvRelation(BaseModel):
    """Endorsement relation: one or more condition and addition records."""

    model_config = {"extra": "forbid", "frozen": True}

    condition: list[Ect] = Field(min_length=1)
    addition: list[Ect] = Field(min_length=1)


class EvsSeriesEntry(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    selection: list[Ect] = Field(min_length=1)
    addition: list[Ect] = Field(min_length=1)


class EvsRelation(BaseModel):
    """Conditional endorsement series relation.

    Produced from endorsement documents, never from CoSERV results; it is
    part of the bundle so every store exposes the same three sequences.
    """

    model_config = {"extra": "forbid", "frozen": True}

    condition: list[Ect] = Field(min_length=1)
    series: list[EvsSeriesEntry] = Field(min_length=1)


class RelationBundle(BaseModel):
    """Three ordered relation lists produced by one or more translations.

    Order is insertion order. Nothing is deduplicated or sorted.
    """

    model_config = {"extra": "forbid", "populate_by_name": True}

    rv_list: list[RvRelation] = Field(default_factory=list, alias="rv-list")
    ev_list: list[EvRelation] = Field(default_factory=list, alias="ev-list")
    evs_list: list[EvsRelation] = Field(default_factory=list, alias="evs-list")

    def __len__(self) -> int:
        return len(self.rv_list) + len(self.ev_list) + len(self.evs_list)

    def is_empty(self) -> bool:
        return len(self) == 0

    def extend(self, other: RelationBundle) -> None:
        """Add every record of ``other`` to the end of this bundle.

        ``other`` is treated as consumed; callers should not reuse it.
        """
        self.rv_list.extend(other.rv_list)
        self.ev_list.extend(other.ev_list)
        self.evs_list.extend(other.evs_list)

    def append(self, other: RelationBundle) -> None:
        """Move every record of ``other`` into this bundle, leaving it empty."""
        if other is self:
            return
        self.rv_list.extend(other.rv_list)
        self.ev_list.extend(other.ev_list)
        self.evs_list.extend(other.evs_list)
        other.rv_list.clear()
        other.ev_list.clear()
        other.evs_list.clear()

    def to_json(self) -> str:
        """Pretty JSON dump using the wire list names."""
        return self.model_dump_json(by_alias=True, indent=2)
