"""Delegated-authority relays."""

from telebox.relay.base import AuthSnapshot, DelegatedRelay
from telebox.relay.cache import RelayCache
from telebox.relay.sudo import SudoRelay
from telebox.relay.sure import SureRelay, match_pattern

__all__ = ["AuthSnapshot", "DelegatedRelay", "RelayCache", "SudoRelay", "SureRelay", "match_pattern"]
