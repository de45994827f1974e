"""File-level module graph."""

from sweepp.graph.builder import build_file_graph

__all__ = ["build_file_graph"]
