"""Command-line interface for finpro."""
