#
# src/pymstest/telemetry/__init__.py
#
"""
Logging setup for pymstest.
"""

from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
