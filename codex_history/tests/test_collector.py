import json
import tempfile
import threading
import time
import unittest
from pathlib import Path

from codex_history.collector import parse_all
from codex_history.models import SessionSummary


class ParseAllTests(unittest.IsolatedAsyncioTestCase):
    async def test_parses_real_files_and_drops_unreadable_ones(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        root = Path(tmpdir.name)
        good = root / "good.jsonl"
        good.write_text(json.dumps({"type": "message", "role": "user", "content": "hello"}) + "\n", encoding="utf-8")
        binary = root / "binary.jsonl"
        binary.write_bytes(b"\xff\xfe\x00garbage\n")
        missing = root / "missing.jsonl"

        results = await parse_all([str(good), str(binary), str(missing)], concurrency=4)
        self.assertEqual([r.path for r in results], [str(good)])
        self.assertEqual(results[0].ask, "hello")

    async def test_failures_are_dropped_and_every_path_is_claimed_once(self) -> None:
        seen: list[str] = []
        lock = threading.Lock()

        def fake_parse(path: str) -> SessionSummary:
            with lock:
                seen.append(path)
            if path.endswith("3"):
                raise OSError("boom")
            return SessionSummary(path=path, mtime=1)

        paths = [f"/s/{i}" for i in range(20)]
        results = await parse_all(paths, concurrency=4, parse=fake_parse)

        self.assertEqual(sorted(seen), sorted(paths))
        self.assertEqual(len(seen), len(paths))
        self.assertEqual(
            sorted(r.path for r in results),
            sorted(p for p in paths if not p.endswith("3")),
        )

    async def test_concurrency_is_bounded(self) -> None:
        active = 0
        peak = 0
        lock = threading.Lock()

        def slow_parse(path: str) -> SessionSummary:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1
            return SessionSummary(path=path)

        results = await parse_all([f"/s/{i}" for i in range(12)], concurrency=3, parse=slow_parse)
        self.assertEqual(len(results), 12)
        self.assertLessEqual(peak, 3)
        self.assertGreaterEqual(peak, 1)

    async def test_empty_input(self) -> None:
        self.assertEqual(await parse_all([], concurrency=16), [])

    async def test_zero_concurrency_still_runs_one_worker(self) -> None:
        results = await parse_all(["/a", "/b"], concurrency=0, parse=lambda p: SessionSummary(path=p))
        self.assertEqual(sorted(r.path for r in results), ["/a", "/b"])


if __name__ == "__main__":
    unittest.main()
