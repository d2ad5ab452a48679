"""Configuration module for settlejobs."""

from settlejobs.config.schema import Config
from settlejobs.config.validator import ConfigValidator

__all__ = ["Config", "ConfigValidator"]
