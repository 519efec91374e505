import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from file_explorer.errors import NotFound, from_os_error

logger = logging.getLogger(__name__)

OPERATION_TIMEOUT = 300  # seconds


@dataclass
class CommandResult:
    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def __bool__(self) -> bool:
        return self.ok


def run_command(
    command: List[str], cwd: Optional[str] = None, timeout: int = OPERATION_TIMEOUT
) -> CommandResult:
    """Run an external tool, capturing output and exit status without raising on failure."""
    if shutil.which(command[0]) is None:
        raise NotFound(command[0], "Required tool is not installed")
    cmd_str = " ".join(shlex.quote(arg) for arg in command)
    logger.debug(f"Executing: {cmd_str}")
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out: {cmd_str}")
        return CommandResult(command, -1, "", f"Timed out after {timeout}s")
    if result.returncode != 0:
        err = result.stderr.strip() if result.stderr else "No error output"
        logger.error(f"Command failed ({result.returncode}): {cmd_str}\nError: {err}")
    return CommandResult(command, result.returncode, result.stdout, result.stderr)


def zip_path(source: str, archive: str) -> CommandResult:
    """Create ``archive`` from ``source``; entries are stored relative to its parent."""
    source = os.path.abspath(source)
    archive = os.path.abspath(archive)
    if not os.path.lexists(source):
        raise NotFound(source)
    parent = os.path.dirname(source) or "/"
    return run_command(
        ["zip", "-r", archive, os.path.basename(source) or "."], cwd=parent
    )


def unzip_archive(archive: str, destination: str) -> CommandResult:
    archive = os.path.abspath(archive)
    destination = os.path.abspath(destination)
    if not os.path.isfile(archive):
        raise NotFound(archive)
    try:
        os.makedirs(destination, mode=0o755, exist_ok=True)
    except OSError as e:
        raise from_os_error(e, destination) from e
    return run_command(["unzip", "-o", archive, "-d", destination])
