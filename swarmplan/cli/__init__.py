"""Command-line interface for swarmplan."""
