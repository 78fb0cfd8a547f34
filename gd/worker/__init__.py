"""
Remote worker process holding dataset partitions.
"""

from .worker import Worker

__all__ = ['Worker']
