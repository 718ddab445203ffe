import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

from eisenmatrix.model import Task
from eisenmatrix.persist import FileBlobStore, save_tasks

REPO_ROOT = Path(__file__).resolve().parents[1]
PY = os.environ.get("PYTHON", sys.executable)


class TestValidateStoreToolContract(unittest.TestCase):
    def _run(self, home: Path):
        cmd = [PY, "-m", "eisenmatrix.tools.validate_store", "--home", str(home)]
        return subprocess.run(cmd, cwd=str(REPO_ROOT), text=True, capture_output=True)

    def test_accepts_store_written_by_library(self):
        with tempfile.TemporaryDirectory() as td:
            home = Path(td)
            save_tasks(FileBlobStore(home), [Task(id="a", title="t", date="2024-01-01", created_at_ms=1, updated_at_ms=1)])
            p = self._run(home)
            combined = (p.stdout or "") + "\n" + (p.stderr or "")
            self.assertEqual(p.returncode, 0, combined)
            self.assertIn("[eisenmatrix-validate-store] OK: 1 task(s)", combined)

    def test_reports_invalid_records(self):
        with tempfile.TemporaryDirectory() as td:
            home = Path(td)
            bad = [{"id": "a", "title": "t", "date": "2024-13-01", "urgency": "Low", "importance": "Low", "status": "To Do", "createdAt": 1, "updatedAt": 1}]
            FileBlobStore(home).write("eisenmatrix-tasks", json.dumps(bad))
            p = self._run(home)
            self.assertEqual(p.returncode, 1)
            self.assertIn("tasks[0].date must be YYYY-MM-DD", p.stderr)

    def test_missing_or_corrupt_store(self):
        with tempfile.TemporaryDirectory() as td:
            home = Path(td)
            p = self._run(home)
            self.assertEqual(p.returncode, 2)
            self.assertIn("Missing store file", p.stderr)

            FileBlobStore(home).write("eisenmatrix-tasks", "[{")
            p = self._run(home)
            self.assertEqual(p.returncode, 2)
            self.assertIn("not valid JSON", p.stderr)


if __name__ == "__main__":
    unittest.main(verbosity=2)
