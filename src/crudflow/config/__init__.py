"""Configuration module using Pydantic Settings.

Usage:
    from crudflow.config import ControllerSettings

    settings = ControllerSettings(title_restricted="Not available")
"""

from crudflow.config.settings import ControllerSettings

__all__ = [
    "ControllerSettings",
]
