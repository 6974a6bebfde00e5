"""Extension layer — registration plugins via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from a local directory.
INVARIANT: A plugin that fails to load is a warning, never an error.
"""

from courier.plugins.hookspecs import hookimpl
from courier.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
