"""
Rich-based terminal output for termshell.
"""
from .writer import TerminalWriter
from .progress import BusyIndicator, ProgressBar, Spinner, TextAnimator

__all__ = ['TerminalWriter', 'BusyIndicator', 'ProgressBar', 'Spinner', 'TextAnimator']
