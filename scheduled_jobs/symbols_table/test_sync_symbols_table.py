"""
Tests for the symbol catalog sync: partitioning, the worker pool and the
sync service.
"""

import threading
import time
import unittest
from unittest import mock

from data_layer import Market, Symbol, SymbolsRepository, DatabaseQueryError
from integrations import FinMindClient, FinMindResponse, UpstreamAPIError
from scheduled_jobs.symbols_table.sync_symbols_table import SymbolSyncService
from scheduled_jobs.symbols_table.transformer.transformer import (
    map_stock_info_to_symbols,
    split_into_batches,
)
from scheduled_jobs.symbols_table.utils.utils import async_batch_upsert, run_batch_upsert


def make_symbols(count, market=Market.TW):
    return [Symbol(symbol=f"{1000 + i}", name=f"Stock {i}", market=market) for i in range(count)]


def stock_info(stock_id, name="Test"):
    return {
        'industry_category': 'Semiconductor',
        'stock_id': stock_id,
        'stock_name': name,
        'type': 'twse',
        'date': '2024-01-02',
    }


class TestSplitIntoBatches(unittest.TestCase):

    def test_covers_every_record_once_in_order(self):
        for count in (0, 1, 99, 100, 101, 250, 1000):
            for batch_size in (1, 7, 100):
                records = list(range(count))
                batches = split_into_batches(records, batch_size)

                self.assertEqual(len(batches), -(-count // batch_size))
                self.assertEqual([record for batch in batches for record in batch], records)
                self.assertTrue(all(0 < len(batch) <= batch_size for batch in batches))

    def test_250_records(self):
        batches = split_into_batches(list(range(250)), 100)
        self.assertEqual([len(batch) for batch in batches], [100, 100, 50])

    def test_empty_input(self):
        self.assertEqual(split_into_batches([], 100), [])

    def test_invalid_batch_size(self):
        with self.assertRaises(ValueError):
            split_into_batches([1, 2, 3], 0)


class TestMapStockInfoToSymbols(unittest.TestCase):

    def test_maps_entries(self):
        symbols = map_stock_info_to_symbols([stock_info("2330", "台積電"), stock_info("2317", "鴻海")], Market.TW)

        self.assertEqual([s.symbol for s in symbols], ["2330", "2317"])
        self.assertEqual(symbols[0].name, "台積電")
        self.assertTrue(all(s.market is Market.TW for s in symbols))

    def test_skips_invalid_entries(self):
        entries = [stock_info("2330"), stock_info(""), {'stock_name': 'no id'}, stock_info("X" * 30)]
        symbols = map_stock_info_to_symbols(entries, Market.TW)
        self.assertEqual([s.symbol for s in symbols], ["2330"])

    def test_duplicates_collapse_last_wins(self):
        entries = [stock_info("AAPL", "Old name"), stock_info("MSFT"), stock_info("aapl", "Apple Inc.")]
        symbols = map_stock_info_to_symbols(entries, Market.US)

        self.assertEqual([s.symbol for s in symbols], ["AAPL", "MSFT"])
        self.assertEqual(symbols[0].name, "Apple Inc.")


class TestAsyncBatchUpsert(unittest.TestCase):

    def test_250_records_with_5_workers(self):
        seen = []
        lock = threading.Lock()

        def upsert(batch):
            with lock:
                seen.append(len(batch))
            return len(batch), 0

        result = async_batch_upsert(list(range(250)), upsert, batch_size=100, max_workers=5)

        self.assertEqual(result, (250, 0))
        self.assertEqual(sorted(seen), [50, 100, 100])

    def test_one_outcome_per_batch(self):
        outcomes = run_batch_upsert(list(range(1050)), lambda batch: (len(batch), 0), batch_size=100, max_workers=4)

        self.assertEqual(len(outcomes), 11)
        self.assertEqual(sorted(outcome.batch_id for outcome in outcomes), list(range(1, 12)))
        for outcome in outcomes:
            self.assertLessEqual(outcome.success_count + outcome.error_count, outcome.batch_size)

    def test_failing_batch_is_isolated(self):
        def upsert(batch):
            if batch[0] == 100:
                raise DatabaseQueryError("batch upsert symbols", "deadlock detected")
            return len(batch) - 1, 1

        outcomes = run_batch_upsert(list(range(250)), upsert, batch_size=100, max_workers=2)

        failed = [outcome for outcome in outcomes if outcome.failed]
        self.assertEqual(len(failed), 1)
        self.assertEqual((failed[0].success_count, failed[0].error_count), (0, 100))
        self.assertIsInstance(failed[0].error, DatabaseQueryError)

        total = async_batch_upsert(list(range(250)), upsert, batch_size=100, max_workers=2)
        self.assertEqual(total, (148, 102))

    def test_concurrency_is_bounded(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        def upsert(batch):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1
            return len(batch), 0

        result = async_batch_upsert(list(range(200)), upsert, batch_size=10, max_workers=3)

        self.assertEqual(result, (200, 0))
        self.assertLessEqual(peak, 3)

    def test_no_records(self):
        upsert = mock.Mock()
        self.assertEqual(async_batch_upsert([], upsert), (0, 0))
        upsert.assert_not_called()

    def test_invalid_batch_size_raises(self):
        with self.assertRaises(ValueError):
            async_batch_upsert([1, 2], lambda batch: (len(batch), 0), batch_size=0)

    def test_workers_exit(self):
        before = threading.active_count()
        async_batch_upsert(list(range(30)), lambda batch: (len(batch), 0), batch_size=5, max_workers=5)
        self.assertEqual(threading.active_count(), before)


class TestSymbolSyncService(unittest.TestCase):

    def setUp(self):
        self.symbols_repo = mock.create_autospec(SymbolsRepository, instance=True)
        self.symbols_repo.batch_upsert.side_effect = lambda batch: (len(batch), 0)
        self.finmind_client = mock.create_autospec(FinMindClient, instance=True)
        self.service = SymbolSyncService(self.symbols_repo, self.finmind_client, batch_size=100, max_workers=5)

    def test_sync_market(self):
        entries = [stock_info(str(1000 + i)) for i in range(250)] + [stock_info("")]
        self.finmind_client.get_stock_info.return_value = FinMindResponse(200, "success", entries)

        result = self.service.sync_taiwan_stock_info()

        self.finmind_client.get_stock_info.assert_called_once_with(Market.TW)
        self.assertEqual(result.market, Market.TW)
        self.assertEqual(result.fetched, 251)
        self.assertEqual(result.submitted, 250)
        self.assertEqual(result.skipped, 1)
        self.assertEqual((result.success_count, result.error_count, result.failed_batches), (250, 0, 0))
        self.assertEqual(self.symbols_repo.batch_upsert.call_count, 3)

    def test_non_success_status_is_skipped(self):
        self.finmind_client.get_stock_info.return_value = FinMindResponse(402, "Requests reach the upper limit", [])

        self.assertIsNone(self.service.sync_us_stock_info())
        self.symbols_repo.batch_upsert.assert_not_called()

    def test_transport_failure_propagates(self):
        self.finmind_client.get_stock_info.side_effect = UpstreamAPIError("FinMind", "connection reset")

        with self.assertRaises(UpstreamAPIError):
            self.service.sync_taiwan_stock_info()
        self.symbols_repo.batch_upsert.assert_not_called()

    def test_store_failure_is_counted(self):
        self.finmind_client.get_stock_info.return_value = FinMindResponse(
            200, "success", [stock_info(str(1000 + i)) for i in range(150)]
        )
        self.symbols_repo.batch_upsert.side_effect = DatabaseQueryError("batch upsert symbols", "disk full")

        result = self.service.sync_taiwan_stock_info()

        self.assertEqual((result.success_count, result.error_count, result.failed_batches), (0, 150, 2))

    def test_sync_all_markets_continues_after_failure(self):
        def get_stock_info(market):
            if market is Market.TW:
                raise UpstreamAPIError("FinMind", "timeout")
            return FinMindResponse(200, "success", [stock_info("AAPL"), stock_info("MSFT")])

        self.finmind_client.get_stock_info.side_effect = get_stock_info

        results = self.service.sync_all_markets()

        self.assertIsNone(results[Market.TW])
        self.assertEqual(results[Market.US].success_count, 2)

    def test_get_sync_stats(self):
        self.symbols_repo.get_market_stats.return_value = {"TW": 1800, "US": 6000}
        self.assertEqual(self.service.get_sync_stats(), {"TW": 1800, "US": 6000})


if __name__ == "__main__":
    unittest.main(verbosity=2)
