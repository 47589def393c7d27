import os
import shutil
import logging
import tempfile
from typing import TextIO, Union

from docguard.schema import ApplyResult
from .errors import ApplyError, EncodingError, MissingInputError, PartialApplyError

logger = logging.getLogger("docguard.apply")

BACKUP_SUFFIX = "~"
STREAM_TARGET = "-"


class ApplyProtocol:
    """
    Commits a ValidatedOutput to its target.

    File mode walks UNMODIFIED -> BACKED_UP -> REPLACED. The backup is a verified
    byte-for-byte copy at <path>~ and must exist before the original is touched.
    The replacement is written next to the target and renamed over it, so the path
    holds either the old bytes or the new bytes, never a mix.

    Stream mode writes the text to the sink as-is. No backup, no files.
    """

    def __init__(self, backup_suffix: str = BACKUP_SUFFIX):
        self.backup_suffix = backup_suffix

    def apply(self, target: Union[str, os.PathLike, TextIO], validated: str) -> ApplyResult:
        if isinstance(target, (str, os.PathLike)):
            return self.apply_file(os.fspath(target), validated)
        return self.apply_stream(target, validated)

    def backup_path_for(self, path: str) -> str:
        return f"{path}{self.backup_suffix}"

    def apply_file(self, path: str, validated: str) -> ApplyResult:
        try:
            payload = validated.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(f"Output is not encodable as UTF-8: {e.reason}", target=path)

        try:
            with open(path, "rb") as f:
                original = f.read()
        except OSError as e:
            raise MissingInputError(f"Cannot read target: {e.strerror or e}", target=path)

        # 1. UNMODIFIED -> BACKED_UP
        backup_path = self.backup_path_for(path)
        if os.path.isdir(backup_path):
            raise ApplyError(f"Backup path {backup_path} is a directory", target=path)
        try:
            shutil.copy2(path, backup_path)
            with open(backup_path, "rb") as f:
                copied = f.read()
        except OSError as e:
            raise ApplyError(f"Backup to {backup_path} failed: {e.strerror or e}", target=path)
        if copied != original:
            raise ApplyError(f"Backup {backup_path} does not match the original", target=path)
        logger.info(f"Backed up {path} -> {backup_path}")

        # 2. BACKED_UP -> REPLACED
        # Write through symlinks so the link itself survives.
        real_path = os.path.realpath(path)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{os.path.basename(real_path)}.",
                suffix=".docguard",
                dir=os.path.dirname(real_path)
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            shutil.copymode(backup_path, tmp_path)
            os.replace(tmp_path, real_path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Replacing {path} failed after backup: {e}")
            raise PartialApplyError(
                f"Replacement write failed ({e.strerror or e}); original preserved at {backup_path}",
                backup_path=backup_path,
                target=path
            )
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.info(f"Replaced {path} ({len(payload)} bytes)")
        return ApplyResult(target=path, state="REPLACED", backup_path=backup_path, bytes_written=len(payload))

    def apply_stream(self, sink: TextIO, validated: str) -> ApplyResult:
        try:
            sink.write(validated)
            sink.flush()
        except (OSError, ValueError) as e:
            # ValueError: write to a closed file
            raise ApplyError(f"Writing to output stream failed: {e}", target=STREAM_TARGET)
        return ApplyResult(target=STREAM_TARGET, state="STREAMED", bytes_written=len(validated.encode("utf-8", errors="surrogatepass")))
