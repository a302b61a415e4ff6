"""Command line helpers for parking lookups."""
