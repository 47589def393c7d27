import os
import sys
import logging
from typing import BinaryIO, List, Optional, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .drivers.base import LLMDriver
from .drivers.factory import get_driver
from .decision.commenter import Commenter
from .core.apply import STREAM_TARGET
from .core.errors import DocGuardError, MissingInputError
from .core.encoder import to_text
from .core.pipeline import TargetPipeline
from .core.renderer import PromptRenderer
from .core.settings import Settings
from .core.workspace import scratch_workspace
from .schema import TargetOutcome

logger = logging.getLogger("docguard.app")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def setup_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True
    )


class DocGuardApp:
    """
    Drives the pipeline over every target of one invocation.
    No paths: stream mode (stdin -> stdout, no backup). Paths: backup-then-replace
    each file in turn; one target's failure never stops the next.
    """
    def __init__(self, settings: Settings, driver: Optional[LLMDriver] = None, console: Optional[Console] = None):
        self.settings = settings
        self.console = console or Console(stderr=True, highlight=False)
        self._driver = driver
        self.outcomes: List[TargetOutcome] = []

    @property
    def driver(self) -> LLMDriver:
        # Built lazily: --prompt-only never needs a model
        if self._driver is None:
            self._driver = get_driver(self.settings)
        return self._driver

    def _load_policy(self) -> str:
        path = self.settings.policy_path
        try:
            with open(path, "rb") as f:
                return to_text(f.read())
        except OSError as e:
            raise MissingInputError(f"Policy file not readable: {path} ({e.strerror or e})", target=path)

    def _report(self, outcome: TargetOutcome) -> None:
        if outcome.ok:
            if outcome.result and outcome.result.state == "REPLACED":
                self.console.print(f"[green]✔[/green] {escape(outcome.target)} [dim](backup: {escape(outcome.result.backup_path or '')})[/dim]")
            return
        line = f"docguard: {escape(outcome.target)}: {outcome.stage}: {escape(outcome.error or 'failed')}"
        if outcome.backup_path:
            line += f" [bold](recover from {escape(outcome.backup_path)})[/bold]"
        self.console.print(f"[red]{line}[/red]")

    @staticmethod
    def _unique_targets(paths: List[str]) -> List[str]:
        # A second pass over the same file would back up the rewritten bytes over <path>~.
        seen = set()
        unique = []
        for path in paths:
            key = os.path.realpath(path)
            if key in seen:
                logger.warning(f"Skipping {path}: already targeted in this invocation")
                continue
            seen.add(key)
            unique.append(path)
        return unique

    @staticmethod
    def _spool_stdin(stdin: BinaryIO, source_path: str) -> Optional[TargetOutcome]:
        try:
            data = stdin.read()
        except (OSError, ValueError) as e:
            error = MissingInputError(f"Cannot read standard input: {e}", target=STREAM_TARGET)
            return TargetOutcome(target=STREAM_TARGET, ok=False, stage=error.stage, error=str(error))
        with open(source_path, "wb") as f:
            f.write(data)
        return None

    def run(self, paths: List[str], stdin: Optional[BinaryIO] = None, stdout: Optional[TextIO] = None,
            prompt_only: bool = False) -> int:
        stdout = stdout if stdout is not None else sys.stdout
        self.outcomes = []

        # Invocation-level preconditions: shared by every target
        try:
            policy = self._load_policy()
            PromptRenderer().check_template(self.settings.template_path)
            commenter = Commenter(self.driver) if not prompt_only else None
        except DocGuardError as e:
            self.console.print(f"[red]docguard: {e.stage}: {escape(str(e))}[/red]")
            return EXIT_FAILURE
        except (ValueError, ImportError) as e:
            self.console.print(f"[red]docguard: generate: {escape(str(e))}[/red]")
            return EXIT_FAILURE

        pipeline = TargetPipeline(policy=policy, template_path=self.settings.template_path, commenter=commenter)

        with scratch_workspace() as workspace:
            if not paths:
                stdin = stdin if stdin is not None else sys.stdin.buffer
                work_dir = workspace.target_dir(0)
                source_path = workspace.path("target-0000", "source.txt")
                outcome = self._spool_stdin(stdin, source_path)
                if outcome is None:
                    outcome = pipeline.run(STREAM_TARGET, source_path, work_dir, sink=stdout, prompt_only=prompt_only)
                self.outcomes.append(outcome)
                self._report(outcome)
            else:
                for index, path in enumerate(self._unique_targets(paths)):
                    work_dir = workspace.target_dir(index)
                    outcome = pipeline.run(path, path, work_dir, sink=stdout, prompt_only=prompt_only)
                    self.outcomes.append(outcome)
                    self._report(outcome)

        failed = [o for o in self.outcomes if not o.ok]
        if failed and len(self.outcomes) > 1:
            self.console.print(f"[red]{len(failed)} of {len(self.outcomes)} targets failed[/red]")
        return EXIT_FAILURE if failed else EXIT_OK
