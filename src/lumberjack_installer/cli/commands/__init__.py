"""CLI command modules for the Lumberjack installer."""

from .new import register_new_command

__all__ = ["register_new_command"]
