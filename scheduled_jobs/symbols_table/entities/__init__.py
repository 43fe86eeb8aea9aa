from .batch_outcome import BatchOutcome
from .synchronization_result import SynchronizationResult

__all__ = ['BatchOutcome', 'SynchronizationResult']
