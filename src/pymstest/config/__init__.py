#
# config/__init__.py
#
"""
Configuration handling sub-package for pymstest.

Exports the loading function and core configuration models.
"""

from .loader import load_config
from .models import GlobalConfig, PublishConfig, PyMSTestConfig, RunConfig

__all__ = [
    "GlobalConfig",
    "PublishConfig",
    "PyMSTestConfig",
    "RunConfig",
    "load_config",
]

# 🔼⚙️
