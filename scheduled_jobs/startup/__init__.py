"""
Process startup: concurrent construction of repositories and clients.
"""

from .init_orchestrator import (
    InitUnit,
    DependentInitUnit,
    InitResult,
    StartupError,
    InitTimeoutError,
    InitUnitError,
    initialize_all,
)

__all__ = [
    'InitUnit',
    'DependentInitUnit',
    'InitResult',
    'StartupError',
    'InitTimeoutError',
    'InitUnitError',
    'initialize_all',
]
