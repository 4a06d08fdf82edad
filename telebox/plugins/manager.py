"""
Plugin manager for telebox.

Owns everything a load pass produces: the command registry the dispatcher
reads, the cron jobs plugins declare and the client event handlers they
attach. ``reload()`` rebuilds all of it from the plugin directories.
"""

from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from telebox.bus.events import ChatMessage, EventKind
from telebox.channels.base import BaseClient, EventHandler
from telebox.config.loader import save_prefixes
from telebox.config.schema import Settings
from telebox.core.dispatcher import Dispatcher
from telebox.core.middleware import HookedClient, install_default_middleware
from telebox.core.prefixes import PrefixSet
from telebox.cron.service import CronScheduler
from telebox.errors import ReloadError
from telebox.plugins.base import Plugin, PluginContext, iter_cron_tasks
from telebox.plugins.hooks import HookEvent, HookManager
from telebox.plugins.loader import LoadedPlugin, PluginSource, build_registry, load_plugins
from telebox.plugins.registry import CommandRegistry
from telebox.storage.alias import AliasStore

BUILTIN_PLUGIN_DIR = Path(__file__).resolve().parent.parent / "builtin_plugins"


@dataclass
class LoadReport:
    """Outcome of one reload pass."""
    loaded: list[str] = field(default_factory=list)
    rejected: dict[str, list[str]] = field(default_factory=dict)
    commands: list[str] = field(default_factory=list)
    cron_jobs: list[str] = field(default_factory=list)

    def summary(self) -> str:
        text = f"{len(self.loaded)} plugins, {len(self.commands)} commands, {len(self.cron_jobs)} cron jobs"
        if self.rejected:
            text += f", {len(self.rejected)} rejected"
        return text


class PluginManager:
    """
    Registry service tying loader, dispatcher, scheduler and client together.

    ``client`` may be None for offline use (listing and validating plugins);
    nothing is attached to a client then.
    """

    def __init__(
        self,
        settings: Settings,
        client: BaseClient | None,
        alias_store: AliasStore,
        scheduler: CronScheduler | None = None,
        hooks: HookManager | None = None,
        builtin_dir: Path | None = None,
        user_dir: Path | None = None,
        env_path: Path | None = None,
    ):
        self.settings = settings
        self.alias_store = alias_store
        self.scheduler = scheduler or CronScheduler()
        if hooks is None:
            hooks = HookManager()
            install_default_middleware(hooks)
        self.hooks = hooks
        self.builtin_dir = builtin_dir or BUILTIN_PLUGIN_DIR
        self.user_dir = user_dir or settings.user_plugin_path
        self.env_path = env_path

        self.raw_client = client
        self.client: BaseClient | None = HookedClient(client, self.hooks) if client else None
        self.prefixes = PrefixSet(settings.prefixes)
        self.dispatcher = Dispatcher(
            self.prefixes,
            alias_store.get,
            self.hooks,
            outgoing=self.client,
            ignore_edited=settings.ignore_edited,
        )
        self.context = PluginContext(manager=self, settings=settings, alias_store=alias_store)
        self.plugins: list[LoadedPlugin] = []

        self._attached: list[tuple[EventHandler, str]] = []
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> CommandRegistry:
        return self.dispatcher.registry

    def sources(self) -> list[PluginSource]:
        """Plugin directories in load order; the first to claim a token keeps it."""
        user = PluginSource(self.user_dir, "user")
        if not self.settings.builtin_plugins:
            return [user]
        builtin = PluginSource(self.builtin_dir, "builtin")
        if self.settings.user_plugins_override:
            return [user, builtin]
        return [builtin, user]

    def get_command_from_message(self, text: str | None) -> str | None:
        return self.dispatcher.extract_command(text)

    def ignores_edited(self, plugin: Plugin) -> bool:
        policy = plugin.ignore_edited
        return self.settings.ignore_edited if policy is None else policy

    async def reload(self) -> LoadReport:
        """
        Rebuild the registry, cron jobs and client handlers from scratch.

        The new registry is built completely before anything is torn down.
        If building fails, ``ReloadError`` is raised and the previous
        registry, jobs and handlers stay active.
        """
        async with self._lock:
            try:
                result = load_plugins(self.sources(), self.context)
                registry = build_registry(result.plugins, self.alias_store.aliases_for)
            except Exception as e:
                logger.exception("Reload failed, keeping the previous registry")
                raise ReloadError(str(e)) from e

            self._detach()
            self.scheduler.clear()
            self.dispatcher.registry = registry
            self.plugins = result.plugins
            cron_jobs = self._schedule(result.plugins)
            self._attach(result.plugins)

            report = LoadReport(
                loaded=[p.name for p in result.plugins],
                rejected=dict(result.rejected),
                commands=registry.listing(),
                cron_jobs=cron_jobs,
            )
            logger.info(f"Reloaded: {report.summary()}")
            await self.hooks.emit(HookEvent.ON_RELOAD, report=report)
            return report

    async def shutdown(self) -> None:
        """Detach every handler, stop every cron job and empty the registry."""
        async with self._lock:
            self._detach()
            self.scheduler.clear()
            self.dispatcher.registry = CommandRegistry()
            self.plugins = []
            logger.info("Plugin manager shut down")

    def set_prefixes(self, prefixes: Iterable[str], persist: bool = True) -> bool:
        """
        Replace the trigger list in place.

        Raises ValueError if ``prefixes`` is empty. Returns False if the new
        list could not be persisted.
        """
        current = self.prefixes.replace(prefixes)
        self.settings.prefix = " ".join(current)
        logger.info(f"Prefixes set to {current}")
        if persist:
            return save_prefixes(current, self.env_path)
        return True

    # ---- cron ----

    def _schedule(self, plugins: list[LoadedPlugin]) -> list[str]:
        for loaded in plugins:
            for name, task in iter_cron_tasks(loaded.plugin):
                handler = functools.partial(task.handler, self.client)
                self.scheduler.set(name, task.cron, handler, task.description)
        return self.scheduler.names()

    # ---- client handlers ----

    def _attach(self, plugins: list[LoadedPlugin]) -> None:
        if self.raw_client is None:
            return
        self._add(self.dispatcher.on_new_message, EventKind.NEW_MESSAGE)
        self._add(self.dispatcher.on_edited_message, EventKind.EDITED_MESSAGE)

        for loaded in plugins:
            plugin = loaded.plugin
            if plugin.listen_message_handler is not None:
                listener = self._isolated(loaded.name, plugin.listen_message_handler)
                self._add(listener, EventKind.NEW_MESSAGE)
                if not self.ignores_edited(plugin):
                    self._add(listener, EventKind.EDITED_MESSAGE)
            for sub in plugin.event_handlers or []:
                self._add(self._isolated(loaded.name, sub.handler), sub.event)

    def _add(self, handler: EventHandler, event: str) -> None:
        self.raw_client.add_event_handler(handler, event)
        self._attached.append((handler, str(event)))

    def _detach(self) -> None:
        if self.raw_client is None:
            self._attached.clear()
            return
        for handler, event in self._attached:
            self.raw_client.remove_event_handler(handler, event)
        self._attached.clear()

    def _isolated(self, plugin_name: str, handler: EventHandler) -> EventHandler:
        """Bind inbound messages to the hooked client and contain handler failures."""

        async def run(message: ChatMessage) -> Any:
            if self.client is not None:
                message = message.bind(self.client)
            try:
                return await handler(message)
            except Exception as e:
                logger.error(f"Listener of plugin {plugin_name} failed: {e}")

        run.__name__ = f"{plugin_name}_listener"
        return run
