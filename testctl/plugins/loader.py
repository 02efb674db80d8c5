"""Load plugin modules from disk and validate them against the taxonomy.

Plugin module paths come from the controller configuration and are trusted:
loading a module executes its top-level code.

Modules are imported under a fresh name on every call and never registered in
``sys.modules``, so loading the same path twice re-imports the module and
builds a new plugin each time.
"""

from __future__ import annotations

import importlib.util
import inspect
import itertools
import logging
from pathlib import Path
from types import ModuleType

from testctl.plugins.base import Plugin, PluginFactory
from testctl.plugins.types import (
    FactoryNotFoundError,
    MultipleFactoriesError,
    PluginArgumentError,
    PluginDescriptor,
    PluginLoadError,
    PluginModuleNotFoundError,
    PluginType,
    PluginTypeMismatchError,
    UnknownPluginTypeError,
)

logger = logging.getLogger(__name__)

# Module-level symbol a plugin module may define to name its factory directly.
FACTORY_SYMBOL = "plugin_factory"

_load_counter = itertools.count()


def _require(value: str | Path | None, name: str) -> str:
    if value is None or not str(value).strip():
        raise PluginArgumentError(f"'{name}' must not be empty")
    return str(value)


def parse_plugin_type(value: str) -> PluginType:
    """Parse a capability string, ignoring case.

    Both the value (``TestReader``) and the member name (``TEST_READER``)
    are accepted.

    Raises:
        UnknownPluginTypeError: If *value* names no capability.
    """
    wanted = _require(value, "type").strip().lower()
    for member in PluginType:
        if wanted in (member.value.lower(), member.name.lower()):
            return member
    raise UnknownPluginTypeError(f"Invalid plugin type '{value}' was found.")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _import_module(path: Path) -> ModuleType:
    module_name = f"testctl_plugin_{path.stem}_{next(_load_counter)}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Cannot import plugin module: '{path}'")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise PluginLoadError(f"Failed to import '{path}': {exc}") from exc
    logger.debug("Imported plugin module %s as %s", path, module_name)
    return module


def _is_concrete_factory(obj: object) -> bool:
    return (
        inspect.isclass(obj)
        and issubclass(obj, PluginFactory)
        and not inspect.isabstract(obj)
    )


def _find_factory(module: ModuleType, path: Path) -> type[PluginFactory]:
    declared = getattr(module, FACTORY_SYMBOL, None)
    if declared is not None:
        if not _is_concrete_factory(declared):
            raise FactoryNotFoundError(
                f"'{FACTORY_SYMBOL}' in '{path}' is not a concrete PluginFactory"
            )
        return declared

    # Only classes defined in the module count; imported ones belong elsewhere.
    factories = [
        obj for _, obj in inspect.getmembers(module, _is_concrete_factory)
        if obj.__module__ == module.__name__
    ]
    if not factories:
        raise FactoryNotFoundError(f"No implementations of PluginFactory were found in: '{path}'!")
    if len(factories) > 1:
        names = ", ".join(f.__name__ for f in factories)
        raise MultipleFactoriesError(
            f"Expected one PluginFactory in '{path}', found {len(factories)}: {names}"
        )
    return factories[0]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_plugin(module_path: str | Path, config_path: str | Path) -> Plugin:
    """Import *module_path* and build its plugin.

    Args:
        module_path: Path to the plugin's ``.py`` file.
        config_path: Controller configuration handed to the factory.

    Returns:
        A new plugin instance.

    Raises:
        PluginArgumentError: If either argument is blank.
        PluginModuleNotFoundError: If the module file does not exist.
        FactoryNotFoundError: If the module has no usable factory.
        MultipleFactoriesError: If the module defines several factories.
        PluginLoadError: If importing fails, or the factory returns a non-plugin
            or a plugin without a valid ``plugin_type``.
    """
    path = Path(_require(module_path, "module_path"))
    config = _require(config_path, "config_path")

    if not path.is_file():
        raise PluginModuleNotFoundError(f"Could not find: '{path}'!")

    module = _import_module(path)
    factory_cls = _find_factory(module, path)
    logger.debug("Using factory %s from %s", factory_cls.__name__, path)

    plugin = factory_cls().get_plugin(config)
    if not isinstance(plugin, Plugin):
        raise PluginLoadError(
            f"{factory_cls.__name__}.get_plugin() in '{path}' returned "
            f"{type(plugin).__name__}, not a Plugin"
        )
    if not isinstance(getattr(plugin, "plugin_type", None), PluginType):
        raise PluginLoadError(
            f"{type(plugin).__name__} from '{path}' does not declare a valid plugin_type"
        )
    return plugin


def get_plugin(descriptor: PluginDescriptor, config_path: str | Path) -> Plugin:
    """Load the plugin described by *descriptor* and check its capability.

    Raises:
        PluginArgumentError: If the descriptor is missing or has blank fields.
        UnknownPluginTypeError: If the requested type is not in the taxonomy.
        PluginTypeMismatchError: If the plugin has a different capability.

    Any error from :func:`load_plugin` propagates unchanged.
    """
    if descriptor is None:
        raise PluginArgumentError("'descriptor' must not be None")
    path = _require(descriptor.path, "path")
    wanted = parse_plugin_type(descriptor.type)

    plugin = load_plugin(path, config_path)
    if plugin.plugin_type != wanted:
        raise PluginTypeMismatchError(
            f"Wrong plugin type found!  Expecting '{wanted.value}', "
            f"but got '{plugin.plugin_type.value}' in '{path}'."
        )

    logger.info("Loaded plugin %s (%s) from %s", plugin.name, wanted.value, path)
    return plugin
