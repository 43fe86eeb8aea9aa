"""
Parallel initialization of independent subsystems.

Every InitUnit runs on its own thread and reports its handle (or error) on a
queue. One deadline bounds the whole concurrent phase: startup either gets
every handle or fails as a unit. Dependent units then run one at a time and
read only handles that are already populated.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class StartupError(Exception):
    """Base exception for startup failures."""
    pass


class InitTimeoutError(StartupError):
    """Raised when the concurrent phase does not finish before the deadline."""

    def __init__(self, timeout: float, pending: Sequence[str]):
        self.timeout = timeout
        self.pending = list(pending)
        super().__init__(f"Initialization timed out after {timeout}s; pending: {', '.join(self.pending)}")


class InitUnitError(StartupError):
    """Raised when a unit fails to construct its handle."""

    def __init__(self, unit_name: str, error: BaseException):
        self.unit_name = unit_name
        self.error = error
        super().__init__(f"Failed to initialize {unit_name}: {error}")


@dataclass(frozen=True)
class InitUnit:
    """Independent subsystem constructor."""
    name: str
    constructor: Callable[[], Any]


@dataclass(frozen=True)
class DependentInitUnit:
    """Subsystem constructor that reads handles produced by earlier units."""
    name: str
    constructor: Callable[[Mapping[str, Any]], Any]
    requires: Tuple[str, ...] = field(default_factory=tuple)


class InitResult(Mapping[str, Any]):
    """Read-only mapping of unit name to constructed handle."""

    def __init__(self, handles: Dict[str, Any]):
        self._handles = dict(handles)

    def __getitem__(self, name: str) -> Any:
        return self._handles[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __repr__(self) -> str:
        return f"InitResult({sorted(self._handles)})"


# (unit name, handle, error)
_UnitReport = Tuple[str, Any, Optional[BaseException]]


def _run_unit(unit: InitUnit, reports: "queue.Queue[_UnitReport]") -> None:
    try:
        handle = unit.constructor()
    except BaseException as e:
        reports.put((unit.name, None, e))
        return
    reports.put((unit.name, handle, None))


def _check_unique_names(names: List[str]) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Duplicate init unit name: {name}")
        seen.add(name)


def initialize_all(units: Sequence[InitUnit],
                   timeout: float,
                   dependent_units: Sequence[DependentInitUnit] = ()) -> InitResult:
    """
    Construct all units concurrently, then the dependent units in order.

    Args:
        units: Independent units, started together with no ordering guarantee
        timeout: Seconds allowed for the whole concurrent phase
        dependent_units: Units run sequentially after the concurrent phase succeeds

    Returns:
        InitResult holding every handle

    Raises:
        InitTimeoutError: If some units have not reported when the deadline passes
        InitUnitError: For the first unit error in arrival order, raised after
            every unit has finished, or for a failing or unsatisfied dependent unit
    """
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")
    _check_unique_names([unit.name for unit in units] + [unit.name for unit in dependent_units])

    deadline = time.monotonic() + timeout
    reports: "queue.Queue[_UnitReport]" = queue.Queue()

    for unit in units:
        threading.Thread(
            target=_run_unit,
            args=(unit, reports),
            name=f"init-{unit.name}",
            daemon=True,
        ).start()

    handles: Dict[str, Any] = {}
    pending = [unit.name for unit in units]
    first_error: Optional[InitUnitError] = None

    while pending:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise InitTimeoutError(timeout, pending)
        try:
            name, handle, error = reports.get(timeout=remaining)
        except queue.Empty:
            raise InitTimeoutError(timeout, pending)

        pending.remove(name)
        if error is not None:
            logger.error(f"✗ {name} initialization failed: {error}")
            if first_error is None:
                first_error = InitUnitError(name, error)
            continue

        handles[name] = handle
        logger.info(f"✓ {name} initialized")

    if first_error is not None:
        raise first_error

    for unit in dependent_units:
        missing = [name for name in unit.requires if name not in handles]
        if missing:
            raise InitUnitError(unit.name, LookupError(f"missing dependencies: {', '.join(missing)}"))
        try:
            handles[unit.name] = unit.constructor(InitResult(handles))
        except Exception as e:
            logger.error(f"✗ {unit.name} initialization failed: {e}")
            raise InitUnitError(unit.name, e)
        logger.info(f"✓ {unit.name} initialized")

    logger.info(f"All {len(handles)} components initialized")
    return InitResult(handles)
