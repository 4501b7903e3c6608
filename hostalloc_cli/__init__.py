"""
HostAlloc CLI Package

A Rich-based CLI for HostAlloc Engine providing allocation plans as
terminal tables, plain text or JSON.
"""

from .main import app
from _version import __version__, get_full_version, get_version_dict

__all__ = ["app", "__version__", "get_full_version", "get_version_dict"]
