"""
Logseq EDN host for outline-sync.

Loads the pages of a classic Logseq ``logseq.edn`` export into memory, lets
the reconciler mutate them like any in-memory host, and writes the result back
as EDN.
"""

import collections.abc
import hashlib
import logging
import re
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import edn_format

from ..models import OutlineNode, OutlineTree
from .memory import InMemoryHost

# Logseq writes highlights as ==text==; documents use ^^text^^.
_LOGSEQ_HIGHLIGHT = re.compile(r"==(.+?)==")
_MARKUP_HIGHLIGHT = re.compile(r"\^\^(.+?)\^\^")


def from_logseq_markup(content: str) -> str:
    return _LOGSEQ_HIGHLIGHT.sub(r"^^\1^^", content)


def to_logseq_markup(text: str) -> str:
    return _MARKUP_HIGHLIGHT.sub(r"==\1==", text)


class LogseqEDNHost(InMemoryHost):
    """
    Host backed by a classic Logseq EDN database file.

    Pages are keyed by ``:block/page-name``. Changes stay in memory until
    ``save()`` is called.
    """

    def __init__(self, logseq_db_path: str):
        self.logseq_db_path = Path(logseq_db_path)
        self.edn_file = self.logseq_db_path / "logseq.edn"
        super().__init__(self._load_pages())
        logging.info(f"Initialized Logseq EDN host for: {self.logseq_db_path}")

    @staticmethod
    def _get_logseq_value(data: Any, key: str, default: Any = None) -> Any:
        if not isinstance(data, collections.abc.Mapping):
            return default
        return data.get(edn_format.Keyword(key), default)

    @staticmethod
    def _is_list(value: Any) -> bool:
        return isinstance(value, collections.abc.Sequence) and not isinstance(value, str)

    def _load_pages(self) -> Dict[str, OutlineTree]:
        if not self.edn_file.is_file():
            logging.error(f"Could not find logseq.edn inside the specified directory: {self.logseq_db_path}")
            return {}

        with open(self.edn_file, 'r', encoding='utf-8') as f:
            parsed_data = edn_format.loads(f.read())

        if not isinstance(parsed_data, collections.abc.Mapping):
            logging.error(f"Parsed EDN data is not a recognized format. Expected a map, but got {type(parsed_data)}.")
            return {}

        blocks_data = self._get_logseq_value(parsed_data, 'blocks')
        if not blocks_data or not self._is_list(blocks_data):
            logging.error("Failed to get a valid list from ':blocks' key.")
            return {}

        pages: Dict[str, OutlineTree] = {}
        for page_block in blocks_data:
            page_name = self._get_logseq_value(page_block, 'block/page-name')
            if not page_name:
                continue

            page_uuid = self._get_logseq_value(page_block, 'block/id')
            children_data = self._get_logseq_value(page_block, 'block/children', [])
            children = []
            if self._is_list(children_data):
                children = [
                    self._build_node(item, page_name)
                    for item in children_data
                    if isinstance(item, collections.abc.Mapping)
                ]
            pages[str(page_name)] = OutlineTree(
                uid=str(page_uuid) if page_uuid else str(page_name),
                children=children,
            )

        logging.info(f"Loaded {len(pages)} pages from {self.edn_file}")
        return pages

    def _build_node(self, logseq_block: collections.abc.Mapping, page_name: str) -> OutlineNode:
        content = self._get_logseq_value(logseq_block, 'block/content') or ''
        children_data = self._get_logseq_value(logseq_block, 'block/children', [])

        block_uuid = self._get_logseq_value(logseq_block, 'block/id')
        if block_uuid:
            uid = str(block_uuid)
        else:
            unique_str = f"{page_name}-{content}-{len(children_data or [])}"
            uid = f"block_{hashlib.sha1(unique_str.encode()).hexdigest()[:12]}"

        children = []
        if self._is_list(children_data):
            children = [
                self._build_node(item, page_name)
                for item in children_data
                if isinstance(item, collections.abc.Mapping)
            ]

        return OutlineNode(uid=uid, text=from_logseq_markup(str(content)), children=children)

    @staticmethod
    def _edn_id(uid: str) -> Any:
        try:
            return uuid.UUID(uid)
        except ValueError:
            return uid

    def _dump_node(self, node: OutlineNode) -> Dict[Any, Any]:
        return {
            edn_format.Keyword('block/id'): self._edn_id(node.uid),
            edn_format.Keyword('block/content'): to_logseq_markup(node.text),
            edn_format.Keyword('block/children'): [self._dump_node(c) for c in node.children],
        }

    def save(self, path: Optional[Path] = None) -> Path:
        """
        Write every page back as a classic Logseq EDN export.

        Args:
            path: Target file, defaults to the file the pages were loaded from

        Returns:
            The path written
        """
        target = Path(path) if path else self.edn_file
        blocks: List[Dict[Any, Any]] = []
        for page_name, tree in self.pages.items():
            blocks.append({
                edn_format.Keyword('block/id'): self._edn_id(tree.uid),
                edn_format.Keyword('block/page-name'): page_name,
                edn_format.Keyword('block/children'): [self._dump_node(c) for c in tree.children],
            })

        data = {
            edn_format.Keyword('version'): 1,
            edn_format.Keyword('blocks'): blocks,
        }
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w', encoding='utf-8') as f:
            f.write(edn_format.dumps(data))
        logging.info(f"Saved {len(blocks)} pages to {target}")
        return target
