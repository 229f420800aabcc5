"""Utilities (logging, key mapping)"""
from .logging import log, vlog, warn, set_verbose
from .keys import remote_key_for, strip_root

__all__ = [
    "log", "vlog", "warn", "set_verbose",
    "remote_key_for", "strip_root",
]
