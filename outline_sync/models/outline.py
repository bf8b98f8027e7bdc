"""
Outline tree models for outline-sync.

This module defines the structures a host outliner hands over when asked for a
page: nested nodes carrying raw markup text, plus the flat projection used to
compare trees by position.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class ViewType(str, Enum):
    """How a node's children are displayed by the host."""

    BULLET = "bullet"
    NUMBERED = "numbered"
    DOCUMENT = "document"


class OutlineNode(BaseModel):
    """
    A single node of the host's outline tree.

    The text is raw markup (see ``outline_sync.markup``). The view type, when
    set, applies to this node's descendants until one of them overrides it.
    """

    uid: str = Field(
        ...,
        description="Opaque, stable identifier assigned by the host"
    )

    text: str = Field(
        default="",
        description="Raw markup text of this node only"
    )

    view_type: Optional[ViewType] = Field(
        default=None,
        description="View type set on this node, inherited by descendants"
    )

    children: List['OutlineNode'] = Field(
        default_factory=list,
        description="Ordered child nodes"
    )


class OutlineTree(BaseModel):
    """
    Snapshot of one page as read from a host.

    The page root itself carries no text that takes part in synchronization;
    only its children (level 1) and their descendants do.
    """

    uid: str = Field(
        ...,
        description="Identifier of the page root, used as parent for level 1 nodes"
    )

    view_type: Optional[ViewType] = Field(
        default=None,
        description="View type set on the page root"
    )

    children: List[OutlineNode] = Field(
        default_factory=list,
        description="Top-level nodes of the page"
    )


class FlatEntry(BaseModel):
    """Ephemeral pre-order projection of an outline node."""

    uid: str
    text: str
    level: int = Field(..., ge=1)
    parent_uid: Optional[str] = Field(
        default=None,
        description="Identifier of the parent node, or of the page root for level 1"
    )


# Enable forward references for self-referencing model
OutlineNode.model_rebuild()
