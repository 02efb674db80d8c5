"""
Plugin contract.

Every plugin module ships one :class:`PluginFactory` subclass. The loader
instantiates it with no arguments and asks it for a plugin, passing the
path of the controller configuration so the factory can pick up whatever
settings its plugin needs:

    >>> class MyFactory(PluginFactory):
    ...     def get_plugin(self, config_path: str) -> Plugin:
    ...         return MyPlugin(load_controller_config(config_path))

The host calls :meth:`Plugin.execute` exactly once after construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from testctl.plugins.types import PluginType, TestRecord


class Plugin(ABC):
    """
    Abstract base class for controller plugins.

    Attributes:
        name: Diagnostic name shown in logs and CLI listings
        plugin_type: Capability this plugin fulfils
    """

    name: str = ""
    plugin_type: PluginType

    @abstractmethod
    def execute(self) -> bool:
        """
        Run the plugin.

        Returns:
            True on success, False if the plugin reports failure
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} type={self.plugin_type.value}>"


class ReaderPlugin(Plugin):
    """A plugin that turns some input into an ordered list of test records."""

    plugin_type = PluginType.TEST_READER

    def __init__(self) -> None:
        self.tests: list[TestRecord] = []


class PluginFactory(ABC):
    """Builds a :class:`Plugin` from the controller configuration."""

    @abstractmethod
    def get_plugin(self, config_path: str) -> Plugin:
        """Return a new plugin configured from *config_path*."""
