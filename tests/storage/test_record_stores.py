"""Tests for the sqlite record stores."""

import pytest

from telebox.storage.alias import AliasRecord, AliasStore
from telebox.storage.auth import ChatRecord, PatternRecord, PrincipalRecord, SudoStore, SureStore


@pytest.fixture
def aliases(tmp_path):
    return AliasStore(tmp_path / "alias" / "alias.db")


def test_alias_upsert_and_lookup(aliases):
    aliases.set("p", "ping")
    aliases.set("pp", "ping")
    aliases.set("p", "pong")

    assert aliases.get("p") == "pong"
    assert aliases.get("missing") is None
    assert aliases.aliases_for("ping") == ["pp"]
    assert aliases.list() == [AliasRecord("p", "pong"), AliasRecord("pp", "ping")]


def test_alias_delete(aliases):
    aliases.set("p", "ping")
    assert aliases.delete("p")
    assert not aliases.delete("p")
    assert aliases.list() == []


def test_alias_chains_are_detected(aliases):
    aliases.set("p", "ping")
    assert aliases.would_chain("q", "p") == "'p' is itself an alias"
    assert aliases.would_chain("ping", "status") == "'ping' is already the original of another alias"
    assert aliases.would_chain("s", "status") is None


def test_alias_store_persists(tmp_path):
    path = tmp_path / "alias.db"
    AliasStore(path).set("p", "ping")
    assert AliasStore(path).get("p") == "ping"


def test_sudo_principals_and_chats(tmp_path):
    store = SudoStore(tmp_path / "sudo.db")
    store.add(5, "friend")
    store.add(5, "renamed")
    store.add_chat(-100, "group")

    assert store.principals() == [PrincipalRecord(5, "renamed")]
    assert store.chats() == [ChatRecord(-100, "group")]
    assert store.delete(5)
    assert store.delete_chat(-100)
    assert not store.delete(5)
    assert store.principals() == []


def test_sure_patterns(tmp_path):
    store = SureStore(tmp_path / "sure.db")
    store.add_pattern("_command:/sb")
    store.add_pattern("hello", "hi")
    store.add_pattern("_command:/sb", "/spam")

    records = store.patterns()
    assert [r.pattern for r in records] == ["_command:/sb", "hello"]
    assert records[0].redirect == "/spam"
    assert records[0].is_command
    assert records[0].command_prefix == "/sb"
    assert not records[1].is_command

    assert store.set_redirect(records[1].id, "")
    assert store.get_pattern(records[1].id) == PatternRecord(records[1].id, "hello", None)
    assert not store.set_redirect(999, "x")
    assert store.delete_pattern(records[0].id)
    assert store.get_pattern(records[0].id) is None


def test_sure_store_keeps_principal_tables(tmp_path):
    store = SureStore(tmp_path / "sure.db")
    store.add(7, "member")
    assert store.principals() == [PrincipalRecord(7, "member")]
