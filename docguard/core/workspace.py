import os
import signal
import shutil
import logging
import tempfile
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger("docguard.workspace")


class ScratchWorkspace:
    """
    Private scratch directory for one invocation: encoded records, captured stdin.
    Each target gets its own sub-directory so nothing leaks between targets.
    """
    def __init__(self, root: str):
        self.root = root

    def target_dir(self, index: int) -> str:
        path = os.path.join(self.root, f"target-{index:04d}")
        os.makedirs(path, exist_ok=True)
        return path

    def path(self, *parts: str) -> str:
        return os.path.join(self.root, *parts)


def _raise_on_sigterm(signum, frame):
    raise SystemExit(128 + signum)


@contextmanager
def scratch_workspace(prefix: str = "docguard-") -> Iterator[ScratchWorkspace]:
    """
    Yields a ScratchWorkspace that is removed on every exit path.
    SIGTERM is turned into SystemExit while the workspace is held so the
    finally block still runs; SIGINT already arrives as KeyboardInterrupt.
    """
    root = tempfile.mkdtemp(prefix=prefix)
    # signal.signal only works from the main thread
    installed = threading.current_thread() is threading.main_thread()
    previous = signal.signal(signal.SIGTERM, _raise_on_sigterm) if installed else None
    try:
        logger.debug(f"Scratch workspace at {root}")
        yield ScratchWorkspace(root)
    finally:
        shutil.rmtree(root, ignore_errors=True)
        if installed:
            signal.signal(signal.SIGTERM, previous or signal.SIG_DFL)
