"""Open a corpus location in the user's editor."""

import logging
import shlex
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

# Editors that take "-g path:line" or "path:line" instead of "+line path"
_GOTO_FLAG = {"code", "code-insiders", "codium", "cursor"}
_PATH_SUFFIX = {"subl", "zed", "hx", "helix"}


class EditorLauncher:
    """Runs the configured editor on a file at a line.

    The command may carry its own arguments (e.g. ``"emacs -nw"``). The
    editor's exit status is not inspected.
    """

    def __init__(self, command: str, root: Path | str = "."):
        self.command = shlex.split(command) or ["nvim"]
        self.root = Path(root)

    def argv(self, path: str, line: int) -> list[str]:
        target = str(self.root / path)
        name = Path(self.command[0]).name
        if name in _GOTO_FLAG:
            return [*self.command, "-g", f"{target}:{line}"]
        if name in _PATH_SUFFIX:
            return [*self.command, f"{target}:{line}"]
        return [*self.command, f"+{line}", target]

    def open(self, path: str, line: int) -> None:
        argv = self.argv(path, line)
        logger.debug(f"Launching {' '.join(argv)}")
        try:
            subprocess.run(argv, check=False)
        except OSError as exc:
            logger.error(f"Cannot launch editor {self.command[0]}: {exc}")
