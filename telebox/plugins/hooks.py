"""
Hooks for telebox.

Lifecycle points the dispatch layer exposes to middleware: outgoing edits
and deletes, command invocations and reloads.
"""

from enum import StrEnum
from typing import Any, Awaitable, Callable

from loguru import logger


class HookEvent(StrEnum):
    """Lifecycle events middleware can subscribe to."""

    # Outgoing calls (chained; handlers may rewrite or cancel the request)
    PRE_EDIT = "pre_edit"
    PRE_DELETE = "pre_delete"

    # Dispatch
    ON_COMMAND = "on_command"                # Before a command handler runs
    ON_COMMAND_ERROR = "on_command_error"    # A command handler raised

    # Lifecycle
    ON_RELOAD = "on_reload"                  # After a reload swapped the registry


HookHandler = Callable[..., Awaitable[Any]]


class HookManager:
    """
    Central event bus for middleware hooks.

    Usage:
        hooks = HookManager()
        hooks.on(HookEvent.PRE_EDIT, my_pre_edit)
        request = await hooks.emit_chain(HookEvent.PRE_EDIT, request)
    """

    def __init__(self):
        self._listeners: dict[str, list[HookHandler]] = {
            event.value: [] for event in HookEvent
        }

    def on(self, event: HookEvent | str, handler: HookHandler) -> None:
        event_name = str(event)
        self._listeners.setdefault(event_name, []).append(handler)
        logger.debug(f"Hook registered: {event_name} -> {handler.__name__}")

    def off(self, event: HookEvent | str, handler: HookHandler) -> bool:
        """
        Unregister a handler for an event.

        Returns:
            True if the handler was found and removed.
        """
        listeners = self._listeners.get(str(event), [])
        if handler in listeners:
            listeners.remove(handler)
            return True
        return False

    async def emit(self, event: HookEvent | str, **kwargs: Any) -> list[Any]:
        """
        Call every handler for ``event`` with the same kwargs.

        A failing handler is logged and contributes ``None`` to the results.
        """
        event_name = str(event)
        results = []
        for handler in list(self._listeners.get(event_name, [])):
            try:
                results.append(await handler(**kwargs))
            except Exception as e:
                logger.error(f"Hook handler '{handler.__name__}' for '{event_name}' failed: {e}")
                results.append(None)
        return results

    async def emit_chain(self, event: HookEvent | str, data: Any) -> Any:
        """
        Pass ``data`` through every handler in order.

        Each handler receives the output of the previous one; returning None
        keeps the current value.
        """
        event_name = str(event)
        current_data = data
        for handler in list(self._listeners.get(event_name, [])):
            try:
                result = await handler(data=current_data)
                if result is not None:
                    current_data = result
            except Exception as e:
                logger.error(f"Chain handler '{handler.__name__}' for '{event_name}' failed: {e}")
        return current_data

    def handler_count(self, event: HookEvent | str | None = None) -> int:
        if event:
            return len(self._listeners.get(str(event), []))
        return sum(len(h) for h in self._listeners.values())
