"""Dispatch core: prefixes, command dispatch and outgoing middleware."""
