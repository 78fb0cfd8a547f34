"""
Driver-side coordination of remote workers.
"""

from .dispatcher import Dispatcher

__all__ = ['Dispatcher']
