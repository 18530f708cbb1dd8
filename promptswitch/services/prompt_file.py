import os
from pathlib import Path
from typing import Optional

import structlog

from promptswitch.errors import FileIOError

log = structlog.get_logger()


class PromptFile:
    """The external text file that mirrors the active prompt.

    Writes go to a ``.tmp`` sibling first and are renamed over the real
    path, so readers never see a partially written file.
    """

    def __init__(self, path):
        self.path = Path(path)

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def read(self) -> Optional[str]:
        """Return the file content, or None if the file does not exist."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8", newline="") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileIOError(self.path, e) from e

    def write(self, content: str) -> None:
        parent = self.path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileIOError(parent, e) from e

        temp_path = self.temp_path
        try:
            with open(temp_path, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
        except (OSError, UnicodeEncodeError) as e:
            # No partial temp file is left next to the prompt file
            temp_path.unlink(missing_ok=True)
            raise FileIOError(temp_path, e) from e

        try:
            os.replace(temp_path, self.path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise FileIOError(self.path, e) from e
        log.debug("prompt_file.written", path=str(self.path), size=len(content))

    def __repr__(self):
        return f"<PromptFile {self.path}>"
