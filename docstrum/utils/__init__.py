"""Utilities."""

from .env import resolve_log_level, setup_logging

__all__ = ['resolve_log_level', 'setup_logging']
