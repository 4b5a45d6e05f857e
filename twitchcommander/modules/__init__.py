"""Command module framework for twitchcommander.

Provides the BaseModule class and the @command marker decorator.
"""

from .base import BaseModule, command, command_methods

__all__ = [
    "BaseModule",
    "command",
    "command_methods",
]
