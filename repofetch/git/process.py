"""
Running the git executable as a child process.

All git work in repofetch goes through ``GitRunner.run``: an explicit argument
vector, merged stdout/stderr streamed line by line to the log, and a
cancellation token that terminates the whole process group of the child.
"""

import logging
import os
import re
import signal
import subprocess
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from repofetch.exceptions import FetchCancelled, GitCommandError

logger = logging.getLogger(__name__)

# Userinfo of URLs in argument vectors and git output, e.g. https://user:token@
_CREDENTIALS_RE = re.compile(r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^/@\s]+@", re.I)

_POLL_INTERVAL = 0.2
_TERMINATE_GRACE = 5


def mask_credentials(text: str) -> str:
    """Replace the userinfo part of any URL in ``text`` with ``***``."""
    return _CREDENTIALS_RE.sub(r"\g<scheme>***@", text)


class CancellationToken:
    """A process-wide abort signal shared by child processes and backoff waits."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> None:
        """
        Block for ``seconds`` unless cancelled first.

        Raises:
            FetchCancelled: If the token is (or becomes) cancelled
        """
        if self._event.wait(seconds):
            raise FetchCancelled("Fetch cancelled while waiting to retry")


class GitRunner:
    """Run git commands, streaming their output to the log."""

    def __init__(
        self,
        executable: str = "git",
        cancellation: Optional[CancellationToken] = None,
    ):
        self.executable = executable
        self.cancellation = cancellation or CancellationToken()

    def run(self, args: Sequence[str], cwd: Optional[Path] = None) -> None:
        """
        Run ``git <args>`` and wait for it to finish.

        Args:
            args: Arguments after the executable, e.g. ["submodule", "init"]
            cwd: Working directory (defaults to the current directory)

        Raises:
            GitCommandError: If git cannot be started or exits non-zero
            FetchCancelled: If the cancellation token fires while git runs
        """
        command: List[str] = [self.executable, *args]
        printable = [mask_credentials(arg) for arg in command]

        if self.cancellation.cancelled:
            raise FetchCancelled(f"Fetch cancelled before running {printable[1]}")

        logger.debug(f"Running {' '.join(printable)} in {cwd or os.getcwd()}")

        try:
            process = subprocess.Popen(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
                start_new_session=True,  # Creates new process group on POSIX
            )
        except OSError as e:
            raise GitCommandError(printable, None, str(e)) from e

        reader = threading.Thread(
            target=self._stream_output, args=(process,), daemon=True
        )
        reader.start()

        try:
            while True:
                try:
                    exit_code = process.wait(timeout=_POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if self.cancellation.cancelled:
                        logger.warning(
                            f"Cancelling {' '.join(printable[:2])}, terminating git..."
                        )
                        self._terminate(process)
                        raise FetchCancelled(
                            f"Fetch cancelled while running {printable[1]}"
                        )
        finally:
            reader.join(timeout=_TERMINATE_GRACE)

        if exit_code != 0:
            raise GitCommandError(printable, exit_code)

    def _stream_output(self, process: subprocess.Popen) -> None:
        assert process.stdout is not None
        with process.stdout:
            for line in process.stdout:
                line = line.rstrip()
                if line:
                    logger.info(mask_credentials(line))

    def _terminate(self, process: subprocess.Popen) -> None:
        # Graceful termination first, SIGTERM to the entire process group
        try:
            if os.name == "posix":
                os.killpg(os.getpgid(process.pid), signal.SIGTERM)
            else:
                process.terminate()
            try:
                process.wait(timeout=_TERMINATE_GRACE)
                return
            except subprocess.TimeoutExpired:
                logger.warning("git did not terminate gracefully, forcing kill...")
            if os.name == "posix":
                os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            else:
                process.kill()
            process.wait()
        except ProcessLookupError:
            # Process already died
            pass
