import unittest
import sys
import os
import io
import tempfile
from unittest.mock import MagicMock

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../../")))

from docguard.core.pipeline import TargetPipeline
from docguard.core.renderer import DEFAULT_TEMPLATE
from docguard.decision.commenter import Commenter
from docguard.core.errors import GenerationError

POLICY = "Use @brief on every function."
SOURCE = "def add(a, b):\n    return a + b\n"
COMMENTED = '"""@brief Adds two numbers."""\ndef add(a, b):\n    return a + b\n'


class TestTargetPipeline(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        self.work_dir = os.path.join(self.root, "scratch")
        os.mkdir(self.work_dir)
        self.path = os.path.join(self.root, "add.py")
        with open(self.path, "w") as f:
            f.write(SOURCE)

        self.driver = MagicMock()
        self.pipeline = TargetPipeline(policy=POLICY, template_path=DEFAULT_TEMPLATE, commenter=Commenter(self.driver))

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, **kwargs):
        return self.pipeline.run(self.path, self.path, self.work_dir, **kwargs)

    def _content(self, path):
        with open(path) as f:
            return f.read()

    def test_fenced_reply_replaces_file(self):
        self.driver.generate_raw.return_value = f"```python\n{COMMENTED}```\n"

        outcome = self._run()

        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(outcome.result.state, "REPLACED")
        self.assertEqual(self._content(self.path), COMMENTED)
        self.assertEqual(self._content(self.path + "~"), SOURCE)

    def test_prompt_carries_policy_and_source(self):
        self.driver.generate_raw.return_value = COMMENTED
        self._run()
        prompt = self.driver.generate_raw.call_args[0][0]
        self.assertIn(POLICY, prompt)
        self.assertIn(SOURCE, prompt)
        self.assertIn(self.path, prompt)

    def test_residual_fence_leaves_file_untouched(self):
        """Rejection happens before apply: no backup, no write."""
        self.driver.generate_raw.return_value = "Here you go:\n```python\n" + COMMENTED + "```\n"

        outcome = self._run()

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "sanitize")
        self.assertIn("code fences", outcome.error)
        self.assertEqual(self._content(self.path), SOURCE)
        self.assertFalse(os.path.exists(self.path + "~"))

    def test_existing_backup_untouched_on_rejection(self):
        with open(self.path + "~", "w") as f:
            f.write("older backup")
        self.driver.generate_raw.return_value = "```\na\n```\n```\nb\n```\n"

        outcome = self._run()

        self.assertFalse(outcome.ok)
        self.assertEqual(self._content(self.path + "~"), "older backup")

    def test_generation_failure(self):
        self.driver.generate_raw.side_effect = TimeoutError("read timed out")

        outcome = self._run()

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "generate")
        self.assertIn("read timed out", outcome.error)
        self.assertFalse(os.path.exists(self.path + "~"))

    def test_empty_reply(self):
        self.driver.generate_raw.return_value = "  \n"
        outcome = self._run()
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "generate")

    def test_lone_fence_never_empties_file(self):
        self.driver.generate_raw.return_value = "```\n"

        outcome = self._run()

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "sanitize")
        self.assertEqual(self._content(self.path), SOURCE)
        self.assertFalse(os.path.exists(self.path + "~"))

    def test_blank_reply_for_blank_source(self):
        with open(self.path, "w") as f:
            f.write("\n")
        self.driver.generate_raw.return_value = "```\n\n```\n"

        outcome = self._run()

        self.assertTrue(outcome.ok)
        self.assertEqual(self._content(self.path), "\n")
        self.assertEqual(self._content(self.path + "~"), "\n")

    def test_missing_source(self):
        missing = os.path.join(self.root, "missing.py")
        outcome = self.pipeline.run(missing, missing, self.work_dir)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "read")
        self.driver.generate_raw.assert_not_called()

    def test_invalid_utf8_source(self):
        with open(self.path, "wb") as f:
            f.write(b"x = '\xff'\n")
        outcome = self._run()
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "assemble")
        self.driver.generate_raw.assert_not_called()

    def test_missing_template(self):
        pipeline = TargetPipeline(policy=POLICY, template_path=os.path.join(self.root, "nope.j2"), commenter=Commenter(self.driver))
        outcome = pipeline.run(self.path, self.path, self.work_dir)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.stage, "render")

    def test_stream_target(self):
        source_path = os.path.join(self.work_dir, "source.txt")
        with open(source_path, "w") as f:
            f.write(SOURCE)
        self.driver.generate_raw.return_value = f"```\n{COMMENTED}```"
        sink = io.StringIO()

        outcome = self.pipeline.run("-", source_path, self.work_dir, sink=sink)

        self.assertTrue(outcome.ok, outcome.error)
        self.assertEqual(outcome.result.state, "STREAMED")
        self.assertEqual(sink.getvalue(), COMMENTED)

    def test_prompt_only(self):
        sink = io.StringIO()
        outcome = self._run(sink=sink, prompt_only=True)
        self.assertTrue(outcome.ok)
        self.assertIn(SOURCE, sink.getvalue())
        self.driver.generate_raw.assert_not_called()
        self.assertEqual(self._content(self.path), SOURCE)


class TestCommenter(unittest.TestCase):
    def test_passes_reply_through(self):
        driver = MagicMock()
        driver.generate_raw.return_value = "```\nx\n```"
        self.assertEqual(Commenter(driver).comment("prompt"), "```\nx\n```")

    def test_driver_error_wrapped(self):
        driver = MagicMock()
        driver.generate_raw.side_effect = RuntimeError("quota exceeded")
        with self.assertRaises(GenerationError) as ctx:
            Commenter(driver).comment("prompt", target="a.py")
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        self.assertEqual(ctx.exception.target, "a.py")

    def test_no_retry(self):
        driver = MagicMock()
        driver.generate_raw.side_effect = RuntimeError("boom")
        with self.assertRaises(GenerationError):
            Commenter(driver).comment("prompt")
        self.assertEqual(driver.generate_raw.call_count, 1)


if __name__ == "__main__":
    unittest.main()
