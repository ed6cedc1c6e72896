"""
ELFScope Shared Module
=======================

Configuration management, structured logging and the console facade
shared by every ELFScope entry point.
"""

from shared.config import ScopeConfig, get_config

__all__ = ["ScopeConfig", "get_config"]
