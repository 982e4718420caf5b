"""Command line interface for finport."""
