#!/usr/bin/env python3
"""
outline-sync - Outline tree / annotated document synchronization

Main entry point for outline-sync. Converts pages of a host outline into flat
annotated documents and reconciles pages with documents received from the
synchronization layer.
"""

import asyncio
import json
import logging
import sys
import argparse
from pathlib import Path
from typing import Optional

from outline_sync.config import config
from outline_sync.conversion import flatten_tree
from outline_sync.errors import HostError, ReconcileError
from outline_sync.hosts import InMemoryHost, LogseqEDNHost
from outline_sync.models import Document
from outline_sync.store import reset_document_store
from outline_sync.sync import PageSync


def setup_logging():
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def load_host(host_type: str, source: str) -> InMemoryHost:
    """
    Open the host holding the pages.

    Args:
        host_type: "json" for a JSON tree file, "logseq" for a Logseq directory
        source: Path of the file or directory

    Returns:
        The loaded host
    """
    if host_type == "logseq":
        return LogseqEDNHost(source)
    return InMemoryHost.from_json_file(source)


def save_host(host: InMemoryHost, source: str) -> None:
    """Write the host's pages back where they came from."""
    if isinstance(host, LogseqEDNHost):
        host.save()
    else:
        host.to_json_file(source)


def resolve_page(host: InMemoryHost, page: Optional[str]) -> str:
    """Use the requested page, or the only/first page of the host."""
    if page:
        return page
    if not host.pages:
        raise HostError("The host has no pages")
    return next(iter(host.pages))


def read_document(path: str) -> Document:
    with open(path, 'r', encoding='utf-8') as f:
        return Document.model_validate(json.load(f))


def write_output(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text + "\n", encoding='utf-8')
        logging.info(f"Wrote {output}")
    else:
        print(text)


def run_export(args) -> None:
    host = load_host(args.host, args.source)
    page = resolve_page(host, args.page)
    document = PageSync(host).calculate_state(page)
    write_output(json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False), args.output)


def run_flatten(args) -> None:
    host = load_host(args.host, args.source)
    page = resolve_page(host, args.page)
    for entry in flatten_tree(host.get_tree(page).children):
        print(f"{'  ' * (entry.level - 1)}- {entry.text}  ({entry.uid})")


def run_apply(args) -> None:
    host = load_host(args.host, args.source)
    page = resolve_page(host, args.page)
    document = read_document(args.document)
    sync = PageSync(host)

    try:
        summary = asyncio.run(sync.apply_state(page, document, save=args.save_state))
    finally:
        # Whatever was applied before a failure is kept, so persist it either way.
        save_host(host, args.source)

    print(f"Updated: {summary.updated}  Moved: {summary.moved}  "
          f"Created: {summary.created}  Deleted: {summary.deleted}")


def run_state(args) -> None:
    sync = PageSync(InMemoryHost())
    if args.action == "show":
        document = sync.load_state(args.page)
        if document is None:
            print(f"No stored state for page '{args.page}'")
            return
        print(json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False))
    elif args.action == "remove":
        if sync.remove_state(args.page):
            print(f"Removed stored state for page '{args.page}'")
        else:
            print(f"No stored state for page '{args.page}'")


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="outline-sync - Outline tree / annotated document synchronization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py export tree.json --page Inbox -o inbox.json    # Page -> document
  python main.py apply tree.json inbox.json --page Inbox          # Document -> page
  python main.py --host logseq apply ./graph doc.json --page "feb 25th, 2022"
  python main.py flatten tree.json                                # Show entries and levels
  python main.py state show Inbox                                 # Stored document
        """
    )

    parser.add_argument(
        "--host",
        choices=["json", "logseq"],
        default="json",
        help="Host the pages are read from (default: json)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="outline-sync 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Convert a page into a document")
    export_parser.add_argument("source", help="JSON tree file or Logseq directory")
    export_parser.add_argument("--page", help="Page to export (default: first page)")
    export_parser.add_argument("-o", "--output", help="Write the document to this file")
    export_parser.set_defaults(func=run_export)

    apply_parser = subparsers.add_parser("apply", help="Reconcile a page with a document")
    apply_parser.add_argument("source", help="JSON tree file or Logseq directory")
    apply_parser.add_argument("document", help="Document JSON file")
    apply_parser.add_argument("--page", help="Page to reconcile (default: first page)")
    apply_parser.add_argument(
        "--save-state",
        action="store_true",
        help="Store the document as the page's last synchronized state"
    )
    apply_parser.set_defaults(func=run_apply)

    flatten_parser = subparsers.add_parser("flatten", help="Print a page's entries in document order")
    flatten_parser.add_argument("source", help="JSON tree file or Logseq directory")
    flatten_parser.add_argument("--page", help="Page to flatten (default: first page)")
    flatten_parser.set_defaults(func=run_flatten)

    state_parser = subparsers.add_parser("state", help="Inspect stored documents")
    state_parser.add_argument("action", choices=["show", "remove"])
    state_parser.add_argument("page", help="Page whose stored document to use")
    state_parser.set_defaults(func=run_state)

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging()

    try:
        args.func(args)

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")

    except ReconcileError as e:
        print(f"\nReconciliation stopped at {e.stage} #{e.index}: {e.cause}")
        print("Mutations applied before the failure were kept; run apply again to retry.")
        sys.exit(1)

    except Exception as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}")
        sys.exit(1)

    finally:
        reset_document_store()


if __name__ == "__main__":
    main()
