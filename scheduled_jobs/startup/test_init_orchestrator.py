"""
Tests for the parallel startup orchestrator and the bootstrap units.
"""

import threading
import time
import unittest
from unittest import mock

from data_layer import DatabaseConnectionManager, SymbolsRepository
from integrations import ClientConfigurationError, FinMindClient
from scheduled_jobs.config import Config
from scheduled_jobs.startup import (
    DependentInitUnit,
    InitResult,
    InitTimeoutError,
    InitUnit,
    InitUnitError,
    StartupError,
    initialize_all,
)
from scheduled_jobs.startup.bootstrap import (
    build_core_units,
    build_sync_dependent_units,
    build_sync_units,
)


class TestInitializeAll(unittest.TestCase):

    def test_all_units_succeed(self):
        result = initialize_all(
            [InitUnit("a", lambda: 1), InitUnit("b", lambda: "two"), InitUnit("c", lambda: None)],
            timeout=5,
        )

        self.assertIsInstance(result, InitResult)
        self.assertEqual(dict(result), {"a": 1, "b": "two", "c": None})

    def test_units_run_concurrently(self):
        barrier = threading.Barrier(3, timeout=2)

        def unit():
            barrier.wait()
            return True

        result = initialize_all([InitUnit(name, unit) for name in ("a", "b", "c")], timeout=5)
        self.assertEqual(len(result), 3)

    def test_hung_unit_times_out(self):
        release = threading.Event()

        def hang():
            release.wait(5)
            return "late"

        started = time.monotonic()
        try:
            with self.assertRaises(InitTimeoutError) as ctx:
                initialize_all(
                    [InitUnit("fast", lambda: 1), InitUnit("hung", hang), InitUnit("also_fast", lambda: 2)],
                    timeout=0.3,
                )
        finally:
            release.set()

        self.assertLess(time.monotonic() - started, 2)
        self.assertEqual(ctx.exception.pending, ["hung"])
        self.assertIsInstance(ctx.exception, StartupError)

    def test_first_error_reported_after_all_finish(self):
        finished = []

        def fail_first():
            raise RuntimeError("first")

        def fail_second():
            time.sleep(0.1)
            raise RuntimeError("second")

        def slow_success():
            time.sleep(0.2)
            finished.append("slow")
            return 1

        with self.assertRaises(InitUnitError) as ctx:
            initialize_all(
                [InitUnit("first", fail_first), InitUnit("second", fail_second), InitUnit("slow", slow_success)],
                timeout=5,
            )

        self.assertEqual(ctx.exception.unit_name, "first")
        self.assertEqual(str(ctx.exception.error), "first")
        self.assertEqual(finished, ["slow"])

    def test_dependent_units_run_in_order(self):
        order = []

        def service(handles):
            order.append("service")
            return f"service({handles['repo']})"

        def jobs(handles):
            order.append("jobs")
            return f"jobs({handles['service']})"

        result = initialize_all(
            [InitUnit("repo", lambda: "repo")],
            timeout=5,
            dependent_units=[
                DependentInitUnit("service", service, requires=("repo",)),
                DependentInitUnit("jobs", jobs, requires=("service",)),
            ],
        )

        self.assertEqual(order, ["service", "jobs"])
        self.assertEqual(result["jobs"], "jobs(service(repo))")

    def test_dependent_phase_skipped_on_failure(self):
        dependent = mock.Mock()

        with self.assertRaises(InitUnitError):
            initialize_all(
                [InitUnit("repo", mock.Mock(side_effect=ValueError("bad")))],
                timeout=5,
                dependent_units=[DependentInitUnit("service", dependent, requires=("repo",))],
            )

        dependent.assert_not_called()

    def test_missing_requirement(self):
        with self.assertRaises(InitUnitError) as ctx:
            initialize_all(
                [InitUnit("repo", lambda: "repo")],
                timeout=5,
                dependent_units=[DependentInitUnit("service", lambda handles: None, requires=("client",))],
            )

        self.assertEqual(ctx.exception.unit_name, "service")

    def test_result_is_read_only(self):
        result = initialize_all([InitUnit("a", lambda: 1)], timeout=5)
        with self.assertRaises(TypeError):
            result["a"] = 2

    def test_duplicate_names(self):
        with self.assertRaises(ValueError):
            initialize_all([InitUnit("a", lambda: 1), InitUnit("a", lambda: 2)], timeout=5)


class TestBootstrap(unittest.TestCase):

    def setUp(self):
        self.db_manager = mock.create_autospec(DatabaseConnectionManager, instance=True)

    def test_sync_units(self):
        config = Config(database_url="postgresql://localhost/test", finmind_api_token="token")

        result = initialize_all(
            build_sync_units(config, self.db_manager),
            timeout=5,
            dependent_units=build_sync_dependent_units(),
        )

        self.assertIsInstance(result["symbols_repo"], SymbolsRepository)
        self.assertIsInstance(result["finmind_client"], FinMindClient)
        self.assertIs(result["symbol_sync_service"].symbols_repo, result["symbols_repo"])

    def test_missing_telegram_token_fails_startup(self):
        config = Config(database_url="postgresql://localhost/test")

        with self.assertRaises(InitUnitError) as ctx:
            initialize_all(build_core_units(config, self.db_manager), timeout=5)

        self.assertEqual(ctx.exception.unit_name, "telegram_client")
        self.assertIsInstance(ctx.exception.error, ClientConfigurationError)

    def test_line_client_is_optional(self):
        config = Config(database_url="postgresql://localhost/test", telegram_bot_token="123:abc")
        units = {unit.name: unit for unit in build_core_units(config, self.db_manager)}

        self.assertIsNone(units["line_client"].constructor())


if __name__ == "__main__":
    unittest.main(verbosity=2)
