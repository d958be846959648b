"""mihoro - manage a local mihomo proxy daemon installation."""

__version__ = "0.3.0"
