"""CLI module for telebox."""
