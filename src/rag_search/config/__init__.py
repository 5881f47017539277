"""rag_search.config

Configuration subsystem for rag_search.

This package provides structured access to the YAML configuration file.

Modules
-------
global_config
    Global configuration loader and cached accessors.
"""
from .global_config import GlobalConfig

__all__ = ["GlobalConfig"]
