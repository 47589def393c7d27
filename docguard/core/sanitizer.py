import re
import logging
import sys
from typing import List, Optional

from .encoder import to_text
from .errors import EncodingError, ResidualFenceError

logger = logging.getLogger("docguard.sanitizer")

FENCE_MARKER = "```"

# Only \n, \r\n and \r end a line; str.splitlines also breaks on \f, \x85, \u2028 and friends.
_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+")


def is_fence_marker(line: str) -> bool:
    """A fence opener (```lang) or closer (```), ignoring leading whitespace."""
    return line.lstrip().startswith(FENCE_MARKER)


def split_lines(text: str) -> List[str]:
    """Split on real line ends only, keeping each terminator."""
    return _LINE_RE.findall(text)


def _is_blank(line: str) -> bool:
    return line.strip() == ""


class FenceSanitizer:
    """
    Enforces the 'single outer fence, otherwise none' contract on generator output.

    Models like to wrap a whole file in ```lang ... ```. Exactly one outer wrapper is
    stripped: the first non-blank line if it is a fence, and the last non-blank line
    if it is a fence. Any fence left after that (nested blocks, a second block,
    commentary around the block) rejects the output. Nothing is repaired.

    A single non-blank line that is itself a fence is read as a fence wrapping empty
    content: it is removed and only the surrounding blank lines remain.
    """

    def __init__(self, target: Optional[str] = None):
        self.target = target

    def sanitize(self, candidate: str) -> str:
        lines = split_lines(candidate)

        # 1. Locate the content bounds
        non_blank = [i for i, line in enumerate(lines) if not _is_blank(line)]
        if not non_blank:
            return ""
        first, last = non_blank[0], non_blank[-1]

        # 2. Mark the outer wrapper
        removed = set()
        if is_fence_marker(lines[first]):
            removed.add(first)
        if last != first and is_fence_marker(lines[last]):
            removed.add(last)

        emitted: List[str] = []
        for i, line in enumerate(lines):
            if i in removed:
                continue
            # 3. Fail closed on anything left behind
            if is_fence_marker(line):
                logger.warning(f"Residual fence at line {i + 1} of {self.target or 'candidate'}")
                raise ResidualFenceError(
                    f"Refusing output containing code fences (line {i + 1})",
                    line_number=i + 1,
                    target=self.target
                )
            emitted.append(line)

        if removed:
            logger.info(f"Stripped {len(removed)} outer fence line(s) from {self.target or 'candidate'}")
        return "".join(emitted)


def sanitize(candidate: str, target: Optional[str] = None) -> str:
    return FenceSanitizer(target=target).sanitize(candidate)


def main() -> int:
    """Filter entry point: untrusted text on stdin, validated text on stdout."""
    # Bytes in, so \r\n survives untouched
    try:
        candidate = to_text(sys.stdin.buffer.read())
        validated = sanitize(candidate)
    except (EncodingError, ResidualFenceError) as e:
        print(f"docguard-sanitize: {e}", file=sys.stderr)
        return 1
    sys.stdout.buffer.write(validated.encode("utf-8"))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
