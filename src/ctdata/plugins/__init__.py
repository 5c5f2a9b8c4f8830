"""Extension layer — plugin system via pluggy.

Discovery: entry points in the ``ctdata.plugins`` group.
Plugin failures are warnings, never errors.
"""

from ctdata.plugins.hookspecs import hookimpl
from ctdata.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
