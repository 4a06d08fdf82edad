"""
Plugin loader for telebox.

Scans plugin directories for ``*.py`` files, imports each one fresh, and
validates its export against the plugin contract. A module exports its
descriptor either as a module-level ``plugin`` or through a
``setup(context)`` function returning one.
"""

import importlib
import importlib.util
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

from loguru import logger

from telebox.errors import PluginValidationError
from telebox.plugins.base import Plugin, PluginContext, validate_plugin
from telebox.plugins.registry import CommandRegistry, RegistryEntry

MODULE_NAMESPACE = "telebox_plugins"


@dataclass
class PluginSource:
    """A directory to scan, tagged so module names never clash across directories."""
    path: Path
    tag: str


@dataclass
class LoadedPlugin:
    name: str
    path: Path
    plugin: Plugin


@dataclass
class LoadResult:
    plugins: list[LoadedPlugin] = field(default_factory=list)
    rejected: dict[str, list[str]] = field(default_factory=dict)


def discover_plugin_files(directory: Path) -> list[Path]:
    """List plugin source files in a directory, sorted by name."""
    if not directory.exists() or not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix == ".py" and not p.name.startswith("_")
    )


def _module_name(tag: str, file_path: Path) -> str:
    stem = re.sub(r"\W", "_", file_path.stem)
    return f"{MODULE_NAMESPACE}.{tag}.{stem}"


def import_fresh(module_name: str, file_path: Path) -> ModuleType:
    """Import a module from a file path, discarding any cached copy first."""
    sys.modules.pop(module_name, None)
    importlib.invalidate_caches()
    spec = importlib.util.spec_from_file_location(module_name, str(file_path))
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not create module spec for {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def read_export(module: ModuleType, context: PluginContext | None) -> Any:
    """Return the plugin descriptor a module exports."""
    setup = getattr(module, "setup", None)
    if callable(setup):
        return setup(context)
    if hasattr(module, "plugin"):
        return module.plugin
    raise AttributeError("module defines neither 'plugin' nor 'setup(context)'")


def load_plugin_file(file_path: Path, tag: str, context: PluginContext | None) -> LoadedPlugin:
    """
    Import and validate one plugin file.

    Raises:
        PluginValidationError: the export does not satisfy the plugin contract.
        Exception: anything the module raised while importing or in setup().
    """
    module = import_fresh(_module_name(tag, file_path), file_path)
    exported = read_export(module, context)
    issues = validate_plugin(exported)
    if issues:
        raise PluginValidationError(file_path.name, issues)
    return LoadedPlugin(name=file_path.stem, path=file_path, plugin=exported)


def load_plugins(sources: list[PluginSource], context: PluginContext | None = None) -> LoadResult:
    """
    Load every plugin file from ``sources`` in order.

    A file that fails to import or validate is logged and skipped; the rest
    still load.
    """
    result = LoadResult()
    for source in sources:
        for file_path in discover_plugin_files(source.path):
            try:
                loaded = load_plugin_file(file_path, source.tag, context)
            except PluginValidationError as e:
                logger.warning(f"Plugin {file_path.name} rejected: {', '.join(e.issues)}")
                result.rejected[str(file_path)] = e.issues
                continue
            except Exception as e:
                logger.error(f"Failed to load plugin {file_path.name}: {e}")
                result.rejected[str(file_path)] = [f"{type(e).__name__}: {e}"]
                continue
            result.plugins.append(loaded)
            logger.debug(f"Loaded plugin: {loaded.name} ({source.tag})")
    return result


def build_registry(
    plugins: list[LoadedPlugin],
    aliases_for: Callable[[str], list[str]],
) -> CommandRegistry:
    """
    Build a command registry from loaded plugins.

    Every handler key gets a direct entry, then every key that won its token
    gets one aliased entry per alias the store knows for it. Direct entries
    are placed first so an alias can never shadow a real command. The first
    plugin to claim a token keeps it.
    """
    registry = CommandRegistry()
    owned: list[tuple[LoadedPlugin, str]] = []
    for loaded in plugins:
        for command in loaded.plugin.cmd_handlers:
            if registry.register(command, RegistryEntry(loaded.plugin)):
                owned.append((loaded, command))
            else:
                logger.warning(f"Command '{command}' from {loaded.name} ignored: token already registered")

    for loaded, command in owned:
        for alias in aliases_for(command):
            if alias == command:
                continue
            if not registry.register(alias, RegistryEntry(loaded.plugin, original=command)):
                logger.warning(f"Alias '{alias}' -> '{command}' ignored: token already registered")
    return registry
