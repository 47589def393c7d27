import unittest
import sys
import os
import io
from contextlib import redirect_stderr
from unittest.mock import patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../../")))

from docguard.core.sanitizer import FenceSanitizer, sanitize, is_fence_marker, split_lines, main
from docguard.core.errors import ResidualFenceError


class TestFenceMarker(unittest.TestCase):
    def test_markers(self):
        self.assertTrue(is_fence_marker("```"))
        self.assertTrue(is_fence_marker("```python\n"))
        self.assertTrue(is_fence_marker("    ```\n"))
        self.assertTrue(is_fence_marker("```   "))
        self.assertFalse(is_fence_marker("x = '```'"))
        self.assertFalse(is_fence_marker("``"))
        self.assertFalse(is_fence_marker(""))


class TestFenceSanitizer(unittest.TestCase):
    def test_single_wrap_stripping(self):
        candidate = "\n".join(["```lang", "body line 1", "body line 2", "```"])
        result = sanitize(candidate)
        self.assertEqual(result.splitlines(), ["body line 1", "body line 2"])
        self.assertEqual(result, "body line 1\nbody line 2\n")

    def test_no_fence_pass_through(self):
        clean = "#!/bin/sh\n\n# comment\necho hi\n\n  indented\n"
        self.assertEqual(sanitize(clean), clean)

    def test_idempotent_on_clean_output(self):
        wrapped = "```python\n\"\"\"Doc.\"\"\"\nx = 1\n```\n"
        once = sanitize(wrapped)
        self.assertEqual(sanitize(once), once)

    def test_residual_rejection(self):
        """More than one fence pair fails closed."""
        candidate = "\n".join(["```", "line", "```", "```", "line2"])
        with self.assertRaises(ResidualFenceError) as ctx:
            sanitize(candidate)
        self.assertEqual(ctx.exception.line_number, 3)

    def test_commentary_after_block_rejected(self):
        candidate = "```python\nx = 1\n```\nHope this helps!\n"
        with self.assertRaises(ResidualFenceError):
            sanitize(candidate)

    def test_commentary_before_block_rejected(self):
        candidate = "Here is the file:\n```python\nx = 1\n```\n"
        with self.assertRaises(ResidualFenceError):
            sanitize(candidate)

    def test_interior_fence_rejected_even_when_indented(self):
        candidate = "# Example:\n#\n    ```\nx = 1\n"
        with self.assertRaises(ResidualFenceError) as ctx:
            sanitize(candidate)
        self.assertEqual(ctx.exception.line_number, 3)

    def test_nested_fence_rejected(self):
        candidate = "```markdown\n# Title\n```python\nx = 1\n```\n```\n"
        with self.assertRaises(ResidualFenceError):
            sanitize(candidate)

    def test_opening_fence_without_closer(self):
        self.assertEqual(sanitize("```python\nx = 1\n"), "x = 1\n")

    def test_closing_fence_without_opener(self):
        self.assertEqual(sanitize("x = 1\n```\n"), "x = 1\n")

    def test_blank_lines_preserved(self):
        candidate = "\n\n```py\na\n\n  b\n```\n\n"
        self.assertEqual(sanitize(candidate), "\n\na\n\n  b\n\n")

    def test_line_terminators_preserved(self):
        self.assertEqual(sanitize("```\r\na\r\nb\r\n```\r\n"), "a\r\nb\r\n")
        self.assertEqual(sanitize("a\nb"), "a\nb")

    def test_empty_and_blank_candidates(self):
        self.assertEqual(sanitize(""), "")
        self.assertEqual(sanitize("  \n\t\n"), "")

    def test_lone_fence_is_empty_wrapper(self):
        """A single fence line is read as a fence around empty content."""
        self.assertEqual(sanitize("```"), "")
        self.assertEqual(sanitize("\n```python\n\n"), "\n\n")

    def test_inline_backticks_untouched(self):
        candidate = "s = '```'\nprint(s)  # ``` in a comment\n"
        self.assertEqual(sanitize(candidate), candidate)

    def test_only_real_line_ends_split(self):
        """Form feeds and Unicode separators stay inside their line."""
        self.assertEqual(split_lines("a\fb\u2028c\x85d\n"), ["a\fb\u2028c\x85d\n"])
        self.assertEqual(split_lines("a\r\nb\rc\nd"), ["a\r\n", "b\r", "c\n", "d"])
        self.assertEqual(split_lines(""), [])

    def test_fence_text_after_line_separator_kept(self):
        clean = "s = 'a\u2028```'\n"
        self.assertEqual(sanitize(clean), clean)
        self.assertEqual(sanitize(sanitize(clean)), clean)

    def test_fence_text_after_form_feed_kept(self):
        self.assertEqual(sanitize("```\nbody\nfoo\x0c```\n"), "body\nfoo\x0c```\n")

    def test_error_carries_target(self):
        with self.assertRaises(ResidualFenceError) as ctx:
            FenceSanitizer(target="app.py").sanitize("a\n```\nb\n")
        self.assertEqual(ctx.exception.target, "app.py")
        self.assertEqual(ctx.exception.stage, "sanitize")


class TestSanitizeFilter(unittest.TestCase):
    """The docguard-sanitize console script: stdin -> stdout, exit status."""

    def _run(self, data: bytes):
        stdin = io.TextIOWrapper(io.BytesIO(data))
        stdout = io.TextIOWrapper(io.BytesIO())
        err = io.StringIO()
        with patch("sys.stdin", stdin), patch("sys.stdout", stdout), redirect_stderr(err):
            rc = main()
        stdout.flush()
        return rc, stdout.buffer.getvalue(), err.getvalue()

    def test_wrapped_reply_passes(self):
        rc, out, err = self._run(b"```bash\necho hi\n```\n")
        self.assertEqual(rc, 0)
        self.assertEqual(out, b"echo hi\n")
        self.assertEqual(err, "")

    def test_crlf_survives(self):
        rc, out, _ = self._run(b"```\r\na\r\nb\r\n```\r\n")
        self.assertEqual(rc, 0)
        self.assertEqual(out, b"a\r\nb\r\n")

    def test_residual_fence_exits_nonzero(self):
        rc, out, err = self._run(b"```\nx\n```\nmore\n```\ny\n```\n")
        self.assertEqual(rc, 1)
        self.assertEqual(out, b"")
        self.assertIn("docguard-sanitize:", err)
        self.assertIn("code fences", err)

    def test_invalid_utf8_exits_nonzero(self):
        rc, out, err = self._run(b"x = '\xff'\n")
        self.assertEqual(rc, 1)
        self.assertEqual(out, b"")
        self.assertIn("docguard-sanitize:", err)


if __name__ == "__main__":
    unittest.main()
