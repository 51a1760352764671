"""Command-line interface for Quarry."""
