"""
Flat document models for outline-sync.

A document is the representation exchanged with the synchronization layer: a
single content string plus an ordered list of typed annotations whose offsets
index into that string.
"""

from enum import Enum
from typing import Any, Dict, List
from pydantic import BaseModel, Field, model_validator


class AnnotationType(str, Enum):
    """The annotation types understood on the wire."""

    BLOCK = "block"
    BOLD = "bold"
    ITALICS = "italics"
    STRIKETHROUGH = "strikethrough"
    HIGHLIGHTING = "highlighting"
    LINK = "link"


class Annotation(BaseModel):
    """
    A typed, half-open range ``[start, end)`` over document content.

    ``attributes`` is type specific: ``{"level", "viewType"}`` for blocks,
    ``{"href"}`` for links and empty for everything else.
    """

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    type: AnnotationType
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_bounds(self) -> "Annotation":
        if self.start > self.end:
            raise ValueError(f"annotation start {self.start} is after its end {self.end}")
        return self

    @property
    def is_block(self) -> bool:
        return self.type == AnnotationType.BLOCK

    def contains(self, other: "Annotation") -> bool:
        """Whether ``other`` lies entirely within this annotation's range."""
        return self.start <= other.start and other.end <= self.end

    def shifted(self, offset: int) -> "Annotation":
        """Return a copy with both bounds moved by ``offset``."""
        return self.model_copy(
            update={"start": self.start + offset, "end": self.end + offset},
            deep=True,
        )


class Document(BaseModel):
    """
    Flat annotated document.

    Produced fresh on every synchronization pass; it has no identity of its own.
    """

    content: str = Field(
        default="",
        description="Concatenated plain text of every block, in document order"
    )

    annotations: List[Annotation] = Field(
        default_factory=list,
        description="Block annotations interleaved with inline annotations"
    )

    @model_validator(mode="after")
    def _check_offsets(self) -> "Document":
        length = len(self.content)
        for annotation in self.annotations:
            if annotation.end > length:
                raise ValueError(
                    f"{annotation.type.value} annotation ends at {annotation.end}, "
                    f"beyond content length {length}"
                )
        return self

    @property
    def blocks(self) -> List[Annotation]:
        return [a for a in self.annotations if a.is_block]


class ExpectedBlock(BaseModel):
    """
    A block the reconciler expects to find at a given position of the tree.

    Built from a block annotation; the inline annotations it contains are
    attached in global coordinates until the block text is re-rendered.
    """

    text: str
    level: int = Field(..., ge=1)
    start: int = 0
    end: int = 0
    annotations: List[Annotation] = Field(default_factory=list)


class ReconcileSummary(BaseModel):
    """Counts of host mutations issued by one reconciliation pass."""

    updated: int = 0
    moved: int = 0
    created: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.updated + self.moved + self.created + self.deleted
