import os
import tempfile
import threading
import unittest

from portfoliowatch.briefs.digest import NewDeal
from portfoliowatch.ingestion.source_types import Source
from portfoliowatch.run.coordinator import RunAlreadyInProgress, RunCoordinator, diff_names
from portfoliowatch.storage.file_snapshots import FileSnapshotStore
from portfoliowatch.storage.snapshot_store import SaveResult, SnapshotStore


A = Source(url="https://a.vc/portfolio", label="Alpha VC")
B = Source(url="https://b.vc/companies", label="Beta Capital")


class PageFetcher:
    """Returns the source URL as "html"; pages map URL -> names or an exception."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def fetch(self, source):
        self.calls.append(source.url)
        result = self.pages[source.url]
        if isinstance(result, Exception):
            raise result
        return source.url


class MemoryStore:
    def __init__(self, data=None, available=True):
        self.data = {k: list(v) for k, v in (data or {}).items()}
        self.available = available
        self.saves = []
        self.opened = 0
        self.closed = 0

    def open(self):
        self.opened += 1
        return self.available

    def load_all(self):
        return {k: list(v) for k, v in self.data.items()}

    def save_all(self, snapshot):
        self.saves.append({k: list(v) for k, v in snapshot.items()})
        self.data = {k: list(v) for k, v in snapshot.items()}
        return SaveResult(primary=self.available, fallback=True)

    def close(self):
        self.closed += 1


class RecordingNotifier:
    def __init__(self, error=None):
        self.messages = []
        self.error = error

    def send(self, message, chat_id=None):
        if self.error:
            raise self.error
        self.messages.append((message, chat_id))
        return True


def _coordinator(pages, store, sources=(A, B), notifier=None, **kwargs):
    fetcher = PageFetcher(pages)
    kwargs.setdefault("sleep", lambda s: None)
    coordinator = RunCoordinator(
        list(sources),
        fetcher,
        store,
        notifier,
        extractor=lambda html, url: list(fetcher.pages[url]),
        **kwargs,
    )
    return coordinator, fetcher


class TestDiff(unittest.TestCase):
    def test_diff_sorts_dedupes_and_subtracts(self):
        current, new = diff_names(["Baz", "Bar", "Baz"], ["Foo", "Bar"])
        self.assertEqual(current, ["Bar", "Baz"])
        self.assertEqual(new, ["Baz"])

    def test_diff_is_case_sensitive(self):
        _, new = diff_names(["aave"], ["Aave"])
        self.assertEqual(new, ["aave"])


class TestRunCoordinator(unittest.TestCase):
    def test_new_names_and_wholesale_replace(self):
        store = MemoryStore({A.url: ["Foo", "Bar"]})
        coordinator, _ = _coordinator({A.url: ["Bar", "Baz"]}, store, sources=[A])
        report = coordinator.run()
        self.assertEqual(report.new_deals, [NewDeal("Baz", "Alpha VC")])
        self.assertEqual(report.total_new_deals, 1)
        self.assertEqual(report.per_source_counts, {A.url: 1})
        self.assertEqual(store.data[A.url], ["Bar", "Baz"])
        self.assertNotIn("Foo", store.data[A.url])

    def test_second_run_on_unchanged_page_finds_nothing(self):
        store = MemoryStore()
        coordinator, _ = _coordinator({A.url: ["Zora", "Aave"], B.url: ["Blur"]}, store)
        first = coordinator.run()
        second = coordinator.run()
        self.assertEqual(first.total_new_deals, 3)
        self.assertEqual(second.total_new_deals, 0)
        self.assertEqual(second.new_deals, [])
        self.assertEqual(store.data, {A.url: ["Aave", "Zora"], B.url: ["Blur"]})

    def test_failed_source_keeps_previous_snapshot(self):
        store = MemoryStore({A.url: ["Old"], B.url: ["Kept", "Names"]})
        coordinator, fetcher = _coordinator(
            {A.url: ["Old", "New"], B.url: TimeoutError("read timed out")}, store
        )
        report = coordinator.run()
        self.assertEqual(fetcher.calls, [A.url, B.url])
        self.assertEqual(store.data[B.url], ["Kept", "Names"])
        self.assertEqual(store.data[A.url], ["New", "Old"])
        self.assertEqual(report.per_source_counts[B.url], 0)
        self.assertIn(B.url, report.failures)
        self.assertEqual(report.new_deals, [NewDeal("New", "Alpha VC")])

    def test_failure_does_not_stop_later_sources(self):
        store = MemoryStore()
        coordinator, fetcher = _coordinator({A.url: ValueError("bad markup"), B.url: ["Blur"]}, store)
        report = coordinator.run()
        self.assertEqual(fetcher.calls, [A.url, B.url])
        self.assertNotIn(A.url, store.data)
        self.assertEqual(store.data[B.url], ["Blur"])
        self.assertEqual(list(report.failures), [A.url])

    def test_empty_extraction_leaves_snapshot_untouched(self):
        store = MemoryStore({A.url: ["Aave"]})
        coordinator, _ = _coordinator({A.url: [], B.url: ["Blur"]}, store)
        report = coordinator.run()
        self.assertEqual(store.data[A.url], ["Aave"])
        self.assertEqual(report.empty_sources, [A.url])
        self.assertEqual(report.failures, {})

    def test_sources_not_configured_are_carried_over(self):
        store = MemoryStore({"https://retired.vc/": ["Legacy"]})
        coordinator, _ = _coordinator({A.url: ["Aave"]}, store, sources=[A])
        coordinator.run()
        self.assertEqual(store.data["https://retired.vc/"], ["Legacy"])

    def test_polite_delay_between_sources(self):
        delays = []
        store = MemoryStore()
        coordinator, _ = _coordinator(
            {A.url: ["Aave"], B.url: RuntimeError("boom")}, store, sleep=delays.append, inter_source_delay=1.0
        )
        coordinator.run()
        self.assertEqual(delays, [1.0])

    def test_persists_once_and_sends_one_digest(self):
        store = MemoryStore()
        notifier = RecordingNotifier()
        coordinator, _ = _coordinator({A.url: ["Aave"], B.url: ["Blur"]}, store, notifier=notifier)
        report = coordinator.run(destination="-100")
        self.assertEqual(len(store.saves), 1)
        self.assertEqual(store.closed, 1)
        self.assertEqual(notifier.messages, [(report.digest, "-100")])
        self.assertIn("Aave (Alpha VC)", report.digest)
        self.assertIn("Blur (Beta Capital)", report.digest)

    def test_digest_caps_listing(self):
        names = [f"Startup{i:02d}" for i in range(12)]
        coordinator, _ = _coordinator({A.url: names}, MemoryStore(), sources=[A])
        report = coordinator.run()
        self.assertTrue(report.digest.startswith("🚀 12 new deals found:"))
        self.assertIn("+2 more", report.digest)
        self.assertNotIn("Startup10", report.digest)

    def test_notification_failure_is_not_fatal(self):
        store = MemoryStore()
        coordinator, _ = _coordinator(
            {A.url: ["Aave"], B.url: ["Blur"]}, store, notifier=RecordingNotifier(error=RuntimeError("down"))
        )
        report = coordinator.run()
        self.assertEqual(report.total_new_deals, 2)
        self.assertEqual(len(store.saves), 1)

    def test_rejects_overlapping_run(self):
        started = threading.Event()
        release = threading.Event()
        store = MemoryStore()

        class BlockingFetcher(PageFetcher):
            def fetch(self, source):
                started.set()
                release.wait(5)
                return super().fetch(source)

        fetcher = BlockingFetcher({A.url: ["Aave"]})
        coordinator = RunCoordinator(
            [A], fetcher, store, extractor=lambda html, url: fetcher.pages[url], sleep=lambda s: None
        )
        results = []
        worker = threading.Thread(target=lambda: results.append(coordinator.run()))
        worker.start()
        self.assertTrue(started.wait(5))
        self.assertTrue(coordinator.is_running)
        with self.assertRaises(RunAlreadyInProgress):
            coordinator.run()
        release.set()
        worker.join(5)
        self.assertFalse(coordinator.is_running)
        self.assertEqual(len(results), 1)
        self.assertEqual(len(store.saves), 1)
        self.assertEqual(fetcher.calls, [A.url])

    def test_independent_coordinators_do_not_block_each_other(self):
        one, _ = _coordinator({A.url: ["Aave"]}, MemoryStore(), sources=[A])
        two, _ = _coordinator({A.url: ["Aave"]}, MemoryStore(), sources=[A])
        self.assertEqual(one.run().total_new_deals, 1)
        self.assertEqual(two.run().total_new_deals, 1)


class TestDegradedPersistence(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def _run(self, name, primary_available):
        path = os.path.join(self.tmp.name, f"{name}.txt")
        FileSnapshotStore(path).save({A.url: ["Foo", "Bar"], B.url: ["Blur"]})

        class Primary:
            is_connected = False

            def connect(self):
                self.is_connected = primary_available
                return primary_available

            def load_all(self):
                return None

            def save_all(self, snapshot):
                return self.is_connected

            def close(self):
                self.is_connected = False

        store = SnapshotStore(Primary(), FileSnapshotStore(path))
        coordinator, _ = _coordinator({A.url: ["Bar", "Baz"], B.url: OSError("reset")}, store)
        return coordinator.run(), FileSnapshotStore(path).load()

    def test_results_match_with_and_without_primary(self):
        healthy, healthy_file = self._run("healthy", True)
        degraded, degraded_file = self._run("degraded", False)

        self.assertFalse(healthy.degraded)
        self.assertTrue(degraded.degraded)
        self.assertTrue(degraded.persisted_fallback)
        self.assertEqual(healthy.new_deals, degraded.new_deals)
        self.assertEqual(healthy.digest, degraded.digest)
        self.assertEqual(degraded_file, {A.url: ["Bar", "Baz"], B.url: ["Blur"]})
        self.assertEqual(healthy_file, degraded_file)

    def test_file_only_rerun_finds_nothing_new(self):
        path = os.path.join(self.tmp.name, "rerun.txt")
        pages = {A.url: ["Zora", "httpx"], B.url: ["Blur"]}
        first, _ = _coordinator(pages, SnapshotStore(None, FileSnapshotStore(path)))
        second, _ = _coordinator(pages, SnapshotStore(None, FileSnapshotStore(path)))
        self.assertEqual(first.run().total_new_deals, 3)
        report = second.run()
        self.assertEqual(report.new_deals, [])
        self.assertFalse(report.degraded)
        self.assertEqual(FileSnapshotStore(path).load(), {A.url: ["Zora", "httpx"], B.url: ["Blur"]})

    def test_corrupt_file_starts_from_empty_snapshot(self):
        path = os.path.join(self.tmp.name, "corrupt.txt")
        with open(path, "wb") as f:
            f.write(b"https://a.vc/portfolio\nAave\n\xff\xfe\n")
        notifier = RecordingNotifier()
        coordinator, fetcher = _coordinator(
            {A.url: ["Aave"], B.url: ["Blur"]}, SnapshotStore(None, FileSnapshotStore(path)), notifier=notifier
        )
        report = coordinator.run()
        self.assertEqual(fetcher.calls, [A.url, B.url])
        self.assertEqual(report.total_new_deals, 2)
        self.assertEqual(len(notifier.messages), 1)
        self.assertEqual(FileSnapshotStore(path).load(), {A.url: ["Aave"], B.url: ["Blur"]})


if __name__ == "__main__":
    unittest.main()
