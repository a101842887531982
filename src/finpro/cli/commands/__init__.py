"""CLI commands for finpro."""
