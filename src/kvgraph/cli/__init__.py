"""Command-line interface for kvgraph."""
