"""SQLite-backed record stores for aliases and relay authorization."""

from telebox.storage.alias import AliasRecord, AliasStore
from telebox.storage.auth import ChatRecord, PatternRecord, PrincipalRecord, SudoStore, SureStore

__all__ = [
    "AliasStore", "AliasRecord",
    "SudoStore", "SureStore",
    "PrincipalRecord", "ChatRecord", "PatternRecord",
]
