"""Configuration for the horizon namespace: models, defaults merging, logging."""

from horizon.config.merger import ConfigMerger
from horizon.config.models import HorizonConfig

__all__ = ["ConfigMerger", "HorizonConfig"]
