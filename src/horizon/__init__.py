"""horizon — queue monitoring dashboard module for a host application."""

__version__ = "0.1.0"
