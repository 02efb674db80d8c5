"""Plugin taxonomy, contract and loader."""

from testctl.plugins.base import Plugin, PluginFactory, ReaderPlugin
from testctl.plugins.loader import get_plugin, load_plugin, parse_plugin_type
from testctl.plugins.types import PluginDescriptor, PluginType, TestRecord

__all__ = [
    "Plugin",
    "PluginDescriptor",
    "PluginFactory",
    "PluginType",
    "ReaderPlugin",
    "TestRecord",
    "get_plugin",
    "load_plugin",
    "parse_plugin_type",
]
