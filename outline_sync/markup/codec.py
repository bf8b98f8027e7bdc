"""
Inline markup codec for outline-sync.

Converts between a node's raw markup text and the pair (plain content, local
annotations) used inside documents. The grammar is deliberately small:

    **bold**   __italics__   ^^highlight^^   ~~strikethrough~~   [text](href)

Tokens nest; overlapping annotations are split so that their markup nests
too. Anything that does not form a complete, non-empty token is kept
as literal text, so parsing never fails.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from ..models import Annotation, AnnotationType


DELIMITERS: List[Tuple[AnnotationType, str]] = [
    (AnnotationType.BOLD, "**"),
    (AnnotationType.ITALICS, "__"),
    (AnnotationType.HIGHLIGHTING, "^^"),
    (AnnotationType.STRIKETHROUGH, "~~"),
]

_LINK_PATTERN = re.compile(r"\[([^\[\]]+)\]\(([^()\s]*)\)")

_Token = Tuple[AnnotationType, str, dict, int]


def _match_token(text: str, index: int) -> Optional[_Token]:
    """
    Try to read a complete token starting at ``index``.

    Returns (type, inner raw text, attributes, index after the token) or None.
    """
    if text[index] == "[":
        match = _LINK_PATTERN.match(text, index)
        if match:
            return AnnotationType.LINK, match.group(1), {"href": match.group(2)}, match.end()
        return None

    for annotation_type, delimiter in DELIMITERS:
        if not text.startswith(delimiter, index):
            continue
        inner_start = index + len(delimiter)
        close = text.find(delimiter, inner_start)
        if close > inner_start:
            return annotation_type, text[inner_start:close], {}, close + len(delimiter)
        return None
    return None


def parse(text: str) -> Tuple[str, List[Annotation]]:
    """
    Parse raw block markup into plain content and block-local annotations.

    Args:
        text: Raw markup text of one node

    Returns:
        Tuple of (content, annotations) where annotation offsets index into
        content. An enclosing token precedes the tokens nested inside it.
    """
    parts: List[str] = []
    annotations: List[Annotation] = []
    length = 0
    index = 0

    while index < len(text):
        token = _match_token(text, index)
        if token is None:
            parts.append(text[index])
            length += 1
            index += 1
            continue

        annotation_type, inner, attributes, index = token
        inner_content, inner_annotations = parse(inner)
        annotations.append(Annotation(
            start=length,
            end=length + len(inner_content),
            type=annotation_type,
            attributes=attributes,
        ))
        annotations.extend(a.shifted(length) for a in inner_annotations)
        parts.append(inner_content)
        length += len(inner_content)

    return "".join(parts), annotations


def markers_for(annotation: Annotation) -> Tuple[str, str]:
    """Return the (prefix, suffix) markup written around an annotation."""
    if annotation.type == AnnotationType.LINK:
        return "[", f"]({annotation.attributes.get('href', '')})"
    for annotation_type, delimiter in DELIMITERS:
        if annotation.type == annotation_type:
            return delimiter, delimiter
    logging.debug(f"No markup for annotation type '{annotation.type.value}', writing it as plain text")
    return "", ""


def shift_bounds(start: int, end: int, applied_start: int, applied_end: int,
                 prefix_length: int, suffix_length: int) -> Tuple[int, int]:
    """
    Move the bounds of a pending annotation past markup just inserted.

    Interior positions are unambiguous. On ties, the pending annotation is
    placed so that markup nests: it goes inside the applied markers when it
    lies within the applied range and outside them when it encloses it.
    """
    opens_inside = start > applied_start or (start == applied_start and end <= applied_end)

    new_start = start
    if opens_inside:
        new_start += prefix_length
    if start > applied_end or (start == applied_end and start > applied_start):
        new_start += suffix_length

    new_end = end
    if end > applied_start or (end == applied_start and start == end and opens_inside):
        new_end += prefix_length
    if end > applied_end or (end == applied_end and start < applied_start):
        new_end += suffix_length

    return new_start, new_end


def _crossing_cut(start: int, end: int, other_start: int, other_end: int) -> Optional[int]:
    """Return the point where [start, end) must be cut to nest with the other range."""
    if start < other_start < end < other_end:
        return other_start
    if other_start < start < other_end < end:
        return other_end
    return None


def nest_spans(annotations: Sequence[Annotation]) -> List[Tuple[int, int, Annotation]]:
    """
    Turn annotations into (start, end, annotation) spans that never cross.

    The grammar cannot express overlapping tokens, so an annotation crossing
    an earlier one is split at that one's boundary; both pieces keep the same
    annotation. Empty annotations have no markup form and are left out.
    """
    spans = [(a.start, a.end, a) for a in annotations if a.start < a.end]

    index = 0
    while index < len(spans):
        start, end, annotation = spans[index]
        cut = next(
            (c for c in (_crossing_cut(start, end, s, e) for s, e, _ in spans[:index]) if c is not None),
            None,
        )
        if cut is None:
            index += 1
            continue
        spans[index:index + 1] = [(start, cut, annotation), (cut, end, annotation)]

    return spans


def serialize(text: str, annotations: Sequence[Annotation]) -> str:
    """
    Render plain content and block-local annotations back into markup.

    Annotations are applied in the given order, after crossing ones have been
    split so that the markup nests (see ``nest_spans``). After each one, the
    bounds of every span still to be applied are shifted by the markers
    inserted. The input annotations are left untouched.

    Args:
        text: Plain block content
        annotations: Annotations with offsets local to ``text``

    Returns:
        The markup text
    """
    spans = nest_spans(annotations)
    bounds = [[start, end] for start, end, _ in spans]
    result = text

    for index, (_, _, annotation) in enumerate(spans):
        start, end = bounds[index]
        prefix, suffix = markers_for(annotation)
        result = f"{result[:start]}{prefix}{result[start:end]}{suffix}{result[end:]}"

        for pending in bounds[index + 1:]:
            pending[0], pending[1] = shift_bounds(
                pending[0], pending[1], start, end, len(prefix), len(suffix)
            )

    return result
