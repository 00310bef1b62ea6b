"""Command modules for Flow CLI."""
