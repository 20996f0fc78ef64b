"""tome - sync AI coding skills across tools."""

__version__ = "0.1.0"
