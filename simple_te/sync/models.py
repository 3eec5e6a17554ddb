"""Sync engine domain models.

Commit events travel from the debouncer to the coordinator's queue; the
snapshot is what presentation layers read back.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field


class CoordinatorState(str, Enum):
    """Whether settled work is still outstanding."""

    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class TemplateCommit:
    """The template text settled after a burst of edits."""

    text: str


@dataclass(frozen=True)
class ValueCommit:
    """A single variable's value settled after a burst of edits."""

    name: str
    value: str


CommitEvent = Union[TemplateCommit, ValueCommit]


class SyncSnapshot(BaseModel):
    """Point-in-time view of a sync session."""

    raw_text: str = Field(description="Template text as last typed, not yet settled")
    text: str = Field(description="Template text the variables and output derive from")
    variables: list[str] = Field(default_factory=list, description="Identifiers in display order")
    values: dict[str, str] = Field(default_factory=dict, description="Current variable store")
    output: str = Field(default="", description="Rendered output")
    error: str | None = Field(default=None, description="Validation message for the template")
    error_detail: str | None = Field(default=None, description="Underlying parse error")
    state: CoordinatorState = Field(default=CoordinatorState.IDLE)
