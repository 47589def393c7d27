import os
from typing import Optional

from docguard.schema import PromptRecord
from .encoder import Blob, to_text, encode, decode
from .errors import EncodingError, MissingInputError

STDIN_SENTINEL = "-"


class PromptAssembler:
    """
    Combines the policy, one source blob and its filename into a PromptRecord.
    Pure: no I/O and no string building from untrusted text. Every field passes
    through the encoder so an unrepresentable blob fails here, not in the renderer.
    """

    def assemble(self, policy: Optional[Blob], source: Optional[Blob], filename: str) -> PromptRecord:
        if policy is None:
            raise MissingInputError("Policy document was not read", target=filename)
        if source is None:
            raise MissingInputError("Source was not read", target=filename)

        # Round-trip each field through the transport encoding.
        try:
            policy_text = decode(encode(to_text(policy)))
            source_text = decode(encode(to_text(source)))
        except EncodingError as e:
            e.target = filename
            raise

        return PromptRecord(
            source_filename=filename,
            policy_content=policy_text,
            source_code=source_text
        )

    @staticmethod
    def write_record(record: PromptRecord, path: str) -> str:
        """Writes the record as JSON (PromptRecord-as-file) for the renderer."""
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(record.to_json())
        return os.path.abspath(path)
