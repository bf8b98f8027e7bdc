"""Host adapters exposing outline trees to outline-sync."""

from .base import BaseHost
from .memory import InMemoryHost
from .logseq_edn import LogseqEDNHost

__all__ = ["BaseHost", "InMemoryHost", "LogseqEDNHost"]
