"""
Reverse reconciliation for outline-sync.

Drives a host's outline tree toward a target document. The target is first
turned back into a list of expected blocks with re-rendered markup, which is
then compared position by position with the flattened tree. Differences
become host mutations that are queued and executed strictly one after the
other; the first failure stops the pass.

The comparison is positional: an insertion in the middle of a page shifts
every later comparison, so the pass converges but may rewrite more nodes than
strictly necessary. Node identity is kept whenever a position survives,
including when only its level changed (a move instead of delete + create).
"""

import logging
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional, Sequence, Tuple

from ..errors import ReconcileError
from ..hosts.base import BaseHost
from ..markup import serialize
from ..models import Document, ExpectedBlock, FlatEntry, ReconcileSummary
from .flattener import flatten_tree


def build_expected_blocks(document: Document) -> List[ExpectedBlock]:
    """
    Rebuild the blocks a document describes.

    Each block annotation yields one expected block. Every other annotation is
    attached to the first block seen so far whose range contains it; those
    without one are dropped.

    Args:
        document: The target document

    Returns:
        Expected blocks in document order, with plain text and global-offset
        inline annotations
    """
    blocks: List[ExpectedBlock] = []
    for annotation in document.annotations:
        if annotation.is_block:
            blocks.append(ExpectedBlock(
                text=document.content[annotation.start:annotation.end],
                level=int(annotation.attributes.get("level") or 1),
                start=annotation.start,
                end=annotation.end,
            ))
            continue

        owner = next(
            (b for b in blocks if b.start <= annotation.start and annotation.end <= b.end),
            None,
        )
        if owner is None:
            logging.debug(
                f"Dropping {annotation.type.value} annotation [{annotation.start}, {annotation.end}) "
                f"outside of any block"
            )
            continue
        owner.annotations.append(annotation)
    return blocks


def render_expected_blocks(blocks: Sequence[ExpectedBlock]) -> List[ExpectedBlock]:
    """Return copies of the blocks whose text carries their inline markup."""
    rendered = []
    for block in blocks:
        local = [a.shifted(-block.start) for a in block.annotations]
        rendered.append(block.model_copy(update={"text": serialize(block.text, local)}))
    return rendered


def locate(expected: Sequence[ExpectedBlock], index: int) -> Tuple[int, int]:
    """
    Compute where the block at ``index`` belongs.

    The parent is the nearest preceding block with a smaller level, or the
    page root (-1) when there is none. The order is the number of blocks at
    the same level between that parent and ``index``.

    Returns:
        Tuple of (parent index or -1, order among the parent's children)
    """
    level = expected[index].level
    parent_index = -1
    for candidate in range(index - 1, -1, -1):
        if expected[candidate].level < level:
            parent_index = candidate
            break

    order = sum(1 for b in expected[max(0, parent_index):index] if b.level == level)
    return parent_index, order


class MutationTask:
    """One queued host mutation, tagged with its stage and block index."""

    def __init__(self, stage: str, index: int, run: Callable[[], Awaitable[None]]):
        self.stage = stage
        self.index = index
        self.run = run

    def __repr__(self):
        return f"MutationTask(stage='{self.stage}', index={self.index})"


class MutationQueue:
    """
    Ordered queue of host mutations drained by a single worker.

    A task is only started once the previous one has completed. The first
    failure is raised as a ReconcileError and the remaining tasks are
    discarded.
    """

    def __init__(self):
        self._tasks: Deque[MutationTask] = deque()

    def __len__(self):
        return len(self._tasks)

    def put(self, stage: str, index: int, run: Callable[[], Awaitable[None]]) -> None:
        if stage not in ReconcileError.STAGES:
            raise ValueError(f"Unknown mutation stage: {stage}")
        self._tasks.append(MutationTask(stage, index, run))

    async def drain(self) -> int:
        """
        Run every queued task in order.

        Returns:
            Number of tasks completed

        Raises:
            ReconcileError: When a task fails
        """
        completed = 0
        while self._tasks:
            task = self._tasks.popleft()
            try:
                await task.run()
            except Exception as e:
                self._tasks.clear()
                error = ReconcileError(task.stage, task.index, e)
                logging.error(f"{error} ({completed} mutations applied before the failure)")
                raise error from e
            completed += 1
        return completed


class Reconciler:
    """
    Applies target documents to a host's outline tree.

    The caller must not run two passes against the same tree at once, and
    nothing else may edit the tree during a pass: the tree snapshot is taken
    once, at the start.
    """

    def __init__(self, host: BaseHost):
        self.host = host

    async def apply_document(self, page: str, document: Document) -> ReconcileSummary:
        """
        Read a page from the host and reconcile it with a document.

        Args:
            page: The page key
            document: The target document

        Returns:
            Counts of the mutations issued
        """
        tree = self.host.get_tree(page)
        actual = flatten_tree(tree.children, parent_uid=tree.uid)
        summary = await self.reconcile(tree.uid, actual, document)
        logging.info(
            f"Reconciled page '{page}': {summary.updated} updated, {summary.moved} moved, "
            f"{summary.created} created, {summary.deleted} deleted"
        )
        return summary

    async def reconcile(self, root_uid: str, actual: Sequence[FlatEntry],
                        document: Document) -> ReconcileSummary:
        """
        Reconcile a flattened tree with a document.

        Args:
            root_uid: Identifier of the page root, parent of level 1 blocks
            actual: The tree's current entries in document order; entries
                without a parent_uid are only moved when their level changes
            document: The target document

        Returns:
            Counts of the mutations issued

        Raises:
            ReconcileError: On the first failed mutation; earlier mutations
                are not rolled back
        """
        expected = render_expected_blocks(build_expected_blocks(document))
        summary = ReconcileSummary()
        # uid holding each expected position, filled in as creations complete
        node_uids: List[Optional[str]] = [None] * len(expected)
        queue = MutationQueue()

        def parent_uid_for(parent_index: int) -> str:
            if parent_index < 0:
                return root_uid
            uid = node_uids[parent_index]
            if uid is None:
                raise RuntimeError(f"No node exists yet for block {parent_index}")
            return uid

        async def update(uid: str, text: str) -> None:
            await self.host.update_text(uid, text)
            summary.updated += 1

        async def move(uid: str, index: int) -> None:
            parent_index, order = locate(expected, index)
            await self.host.move_node(uid, parent_uid_for(parent_index), order)
            summary.moved += 1

        async def create(index: int) -> None:
            parent_index, order = locate(expected, index)
            node_uids[index] = await self.host.create_node(
                parent_uid_for(parent_index), order, expected[index].text
            )
            summary.created += 1

        async def delete(uid: str) -> None:
            await self.host.delete_node(uid)
            summary.deleted += 1

        for index, block in enumerate(expected):
            if index >= len(actual):
                queue.put("create", index, lambda index=index: create(index))
                continue

            entry = actual[index]
            node_uids[index] = entry.uid
            if entry.text != block.text:
                queue.put("update", index, lambda uid=entry.uid, text=block.text: update(uid, text))

            # children travel with a moved ancestor, so an unchanged level can still sit under the wrong parent
            reparented = (
                entry.parent_uid is not None
                and entry.parent_uid != parent_uid_for(locate(expected, index)[0])
            )
            if entry.level != block.level or reparented:
                queue.put("move", index, lambda uid=entry.uid, index=index: move(uid, index))

        for index in range(len(expected), len(actual)):
            queue.put("delete", index, lambda uid=actual[index].uid: delete(uid))

        logging.debug(f"Queued {len(queue)} mutations for {len(expected)} expected and {len(actual)} actual blocks")
        await queue.drain()
        return summary
