"""notegraph - interactive force-directed graph of a wiki-linked note collection."""

__version__ = "0.1.0"
