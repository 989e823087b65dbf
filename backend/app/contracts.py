"""Immutable data contracts for the protein explorer backend."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_CATEGORY_LABEL = "Unknown"


class ExplorerError(Exception):
    """Base class for errors raised while exploring the knowledge graph."""


class InvalidSearchInput(ExplorerError, ValueError):
    """Raised when a search is submitted without a usable term."""

    prompt = "Please enter a protein name or ID!"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.prompt)


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True)


class SearchMode(str, Enum):
    """Supported search shapes."""

    BY_ENTITY_NAME = "name"
    BY_CROSS_REF_ID = "uniprot"
    BY_CATEGORY = "process"

    @property
    def is_entity_search(self) -> bool:
        """Return whether the mode searches for entities rather than categories."""

        return self in (SearchMode.BY_ENTITY_NAME, SearchMode.BY_CROSS_REF_ID)


class DisplayMode(str, Enum):
    """Presentation consumers the explorer can feed."""

    TABLE = "table"
    GRAPH = "graph"
    BUBBLE = "bubble"
    HUMAN = "human"


class NodeKind(str, Enum):
    """Kinds of nodes projected from result rows."""

    ENTITY = "protein"
    CATEGORY = "process"


class ResultRow(_FrozenBaseModel):
    """Uniform row shape extracted from one endpoint binding."""

    entity_id: str = Field(..., min_length=1, description="Entity URI.")
    entity_label: Optional[str] = None
    cross_ref_id: Optional[str] = Field(None, description="External accession, e.g. UniProt.")
    category_id: Optional[str] = None
    category_label: Optional[str] = None

    @property
    def display_entity_label(self) -> str:
        """Return the entity label, falling back to the entity id."""

        return self.entity_label or self.entity_id

    @property
    def display_category_label(self) -> Optional[str]:
        """Return the category label, falling back to the category id."""

        return self.category_label or self.category_id

    @property
    def aggregation_label(self) -> str:
        """Return the label used to group rows into category counts."""

        return self.display_category_label or UNKNOWN_CATEGORY_LABEL


class SearchContext(_FrozenBaseModel):
    """Active search mode and raw term submitted by the user."""

    mode: SearchMode
    term: str = Field(..., min_length=1)

    @field_validator("term")
    @classmethod
    def _reject_blank_term(cls, value: str) -> str:
        """Reject terms made only of whitespace.

        Args:
            value: Raw term supplied by the user.

        Returns:
            str: The unchanged term.

        Raises:
            ValueError: If the term is blank.
        """
        if not value.strip():
            raise ValueError("search term must not be blank")
        return value

    @classmethod
    def create(cls, term: Optional[str], mode: SearchMode | str) -> "SearchContext":
        """Build a context from raw user input.

        Args:
            term: Raw search term; surrounding whitespace is removed.
            mode: Search mode or its string value.

        Returns:
            SearchContext: Validated search context.

        Raises:
            InvalidSearchInput: If the term is missing or blank.
            ValueError: If the mode is not a recognised search mode.
        """
        cleaned = (term or "").strip()
        if not cleaned:
            raise InvalidSearchInput()
        return cls(mode=SearchMode(mode), term=cleaned)

    @property
    def needle(self) -> str:
        """Return the lower-cased term used for containment matching."""

        return self.term.strip().lower()


__all__ = [
    "UNKNOWN_CATEGORY_LABEL",
    "DisplayMode",
    "ExplorerError",
    "InvalidSearchInput",
    "NodeKind",
    "ResultRow",
    "SearchContext",
    "SearchMode",
]
