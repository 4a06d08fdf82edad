"""Plugin contract, loading and lifecycle."""

from telebox.plugins.base import CronTask, EventSubscription, Plugin, PluginContext, validate_plugin
from telebox.plugins.hooks import HookEvent, HookManager
from telebox.plugins.registry import CommandRegistry, RegistryEntry

__all__ = [
    "Plugin",
    "PluginContext",
    "CronTask",
    "EventSubscription",
    "validate_plugin",
    "HookEvent",
    "HookManager",
    "CommandRegistry",
    "RegistryEntry",
]
