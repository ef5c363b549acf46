"""Write the end-of-pass summary consumed by the CI webhook step."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from jirabot.errors import OutputWriteError
from jirabot.utils.logger import log_info


def write_payload(path: Union[str, Path], markdown: str) -> None:
    """Write ``{"response": markdown}`` to ``path``.

    Raises:
        OutputWriteError: the file could not be written
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"response": markdown}, f, ensure_ascii=False)
    except OSError as e:
        raise OutputWriteError(f"failed to write payload to {path}: {e}") from e
    log_info("Payload written", path=str(path), bytes=len(markdown))
