"""Plugin contract: the descriptor every plugin source file exports."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

if TYPE_CHECKING:
    from telebox.bus.events import ChatMessage
    from telebox.channels.base import BaseClient
    from telebox.config.schema import Settings
    from telebox.plugins.manager import PluginManager
    from telebox.storage.alias import AliasStore

CommandHandler = Callable[..., Awaitable[None]]  # (message, trigger=None)
ListenHandler = Callable[["ChatMessage"], Awaitable[None]]
CronHandler = Callable[["BaseClient"], Awaitable[None]]
Description = str | Callable[..., Any]


@dataclass
class CronTask:
    """A named scheduled job declared by a plugin."""
    cron: str
    handler: CronHandler
    description: str = ""


@dataclass
class EventSubscription:
    """A handler attached to an arbitrary client event class."""
    event: str
    handler: ListenHandler


class Plugin:
    """
    Base class for plugin descriptors.

    Subclasses override the class attributes they need:

        class PingPlugin(Plugin):
            description = "Reply with pong"
            cmd_handlers = {"ping": ping}

    A passive listener or a computed description is written as a method so
    it receives the instance:

        class EchoPlugin(Plugin):
            async def listen_message_handler(self, message):
                ...

            async def description(self):
                return "Echo incoming text"

    ``ignore_edited`` left as None follows the process-wide default.
    The collection defaults are read-only; a subclass assigns its own.
    A subclass must declare ``description``, even if only as ``""``.
    ``cron_tasks`` values may be ``CronTask`` or plain dicts with the keys
    ``cron``, ``handler`` and optionally ``description``.
    """

    description: Description | None = None
    cmd_handlers: Mapping[str, CommandHandler] = MappingProxyType({})
    ignore_edited: bool | None = None
    listen_message_handler: ListenHandler | None = None
    event_handlers: tuple[EventSubscription, ...] | list[EventSubscription] = ()
    cron_tasks: Mapping[str, CronTask | dict[str, Any]] = MappingProxyType({})

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass
class PluginContext:
    """Collaborators handed to a plugin module's ``setup(context)``."""
    manager: PluginManager
    settings: Settings
    alias_store: AliasStore

    @property
    def client(self) -> BaseClient | None:
        return self.manager.client


def _is_async_callable(value: Any) -> bool:
    if inspect.iscoroutinefunction(value):
        return True
    call = getattr(value, "__call__", None)
    return inspect.iscoroutinefunction(call)


def validate_plugin(plugin: Any) -> list[str]:
    """Validate a plugin export and return every issue found."""
    issues: list[str] = []

    description = getattr(plugin, "description", None)
    if description is None:
        issues.append("'description' is missing")
    elif not isinstance(description, str) and not callable(description):
        issues.append("'description' must be a string or a function")

    handlers = getattr(plugin, "cmd_handlers", None)
    if not isinstance(handlers, Mapping):
        issues.append("'cmd_handlers' must be a mapping of command to handler")
    else:
        for command, handler in handlers.items():
            if not isinstance(command, str) or not command or any(c.isspace() for c in command):
                issues.append(f"command {command!r} must be a non-empty string without whitespace")
            elif not _is_async_callable(handler):
                issues.append(f"handler for '{command}' must be an async function")

    ignore_edited = getattr(plugin, "ignore_edited", None)
    if ignore_edited is not None and not isinstance(ignore_edited, bool):
        issues.append("'ignore_edited' must be a bool or None")

    listener = getattr(plugin, "listen_message_handler", None)
    if listener is not None and not _is_async_callable(listener):
        issues.append("'listen_message_handler' must be an async function")

    subscriptions = getattr(plugin, "event_handlers", None) or []
    if not isinstance(subscriptions, (list, tuple)):
        issues.append("'event_handlers' must be a list of EventSubscription")
    else:
        for i, sub in enumerate(subscriptions):
            event = getattr(sub, "event", None)
            handler = getattr(sub, "handler", None)
            if not isinstance(event, str) or not event or not _is_async_callable(handler):
                issues.append(f"event_handlers[{i}] needs a string 'event' and an async 'handler'")

    tasks = getattr(plugin, "cron_tasks", None) or {}
    if not isinstance(tasks, Mapping):
        issues.append("'cron_tasks' must be a mapping of name to task")
    else:
        for task_name, task in tasks.items():
            cron, handler = _task_fields(task)
            if not isinstance(cron, str):
                issues.append(f"cron task '{task_name}' is missing a string 'cron'")
            if not callable(handler):
                issues.append(f"cron task '{task_name}' is missing a function 'handler'")

    return issues


def _task_fields(task: Any) -> tuple[Any, Any]:
    if isinstance(task, Mapping):
        return task.get("cron"), task.get("handler")
    return getattr(task, "cron", None), getattr(task, "handler", None)


def iter_cron_tasks(plugin: Plugin) -> list[tuple[str, CronTask]]:
    """Normalize a validated plugin's cron tasks to ``CronTask`` objects."""
    tasks = []
    for task_name, task in (plugin.cron_tasks or {}).items():
        if isinstance(task, CronTask):
            tasks.append((task_name, task))
        else:
            cron, handler = _task_fields(task)
            description = task.get("description", "") if isinstance(task, Mapping) else ""
            tasks.append((task_name, CronTask(cron=cron, handler=handler, description=description or "")))
    return tasks


async def resolve_description(plugin: Plugin, **kwargs: Any) -> str:
    """Return the plugin description, calling and awaiting it when needed."""
    description = plugin.description
    if description is None:
        return ""
    if isinstance(description, str):
        return description
    result = description(**kwargs)
    if inspect.isawaitable(result):
        result = await result
    return str(result or "")
