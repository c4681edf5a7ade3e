"""
Editor commands wiring the patch engine to Qt hosts.
"""

from linepatch.commands.reformat_command import ReformatCommand

__all__ = ['ReformatCommand']
