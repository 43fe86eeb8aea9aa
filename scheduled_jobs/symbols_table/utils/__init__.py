"""
Utils package for symbol table synchronization.
"""

from .utils import async_batch_upsert, run_batch_upsert

__all__ = ['async_batch_upsert', 'run_batch_upsert']
