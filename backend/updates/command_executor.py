"""
In-container command execution.

Runs shell commands inside running containers (used for pre/post update
hooks). A nonzero exit is reported in the log and in the returned ExecResult
but is not raised: hooks are best effort. Callers that want strict semantics
call ExecResult.check().
"""

import logging
from dataclasses import dataclass

from container.daemon import DaemonClient
from container.errors import CommandFailedError, ContainerError
from utils.container_id import short_container_id

logger = logging.getLogger(__name__)


@dataclass
class ExecResult:
    """Outcome of a command that ran (whatever its exit code)."""
    container_id: str
    command: str
    exit_code: int
    output: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def check(self) -> 'ExecResult':
        """Raise CommandFailedError if the command exited nonzero."""
        if not self.succeeded:
            raise CommandFailedError(
                f"Command '{self.command}' exited with code {self.exit_code}",
                exit_code=self.exit_code,
                output=self.output,
                container_id=self.container_id,
            )
        return self


class CommandExecutor:
    """Runs `sh -c <command>` in a container and waits for it to finish."""

    def __init__(self, daemon: DaemonClient):
        self.daemon = daemon

    def execute(self, container_id: str, command: str) -> ExecResult:
        """
        Run a command synchronously and report its outcome.

        Output is captured from a TTY with stdout/stderr attached. If reading the
        output fails the command still runs; its output is just not captured.

        Returns:
            ExecResult with exit code and captured output

        Raises:
            NotFoundError, TransportError: The exec could not be created, started or inspected
        """
        short_id = short_container_id(container_id)
        logger.debug(f"Executing '{command}' in container {short_id}")

        exec_id = self.daemon.exec_create(container_id, ["sh", "-c", command], tty=True)
        stream = self.daemon.exec_start(exec_id, tty=True)

        output = ""
        try:
            output = b"".join(stream).decode("utf-8", errors="replace").strip()
        except ContainerError as e:
            logger.error(f"Failed to read command output from {short_id}: {e}")

        exit_code = self.daemon.exec_inspect(exec_id).get('ExitCode')
        result = ExecResult(
            container_id=container_id,
            command=command,
            exit_code=exit_code if exit_code is not None else -1,
            output=output,
        )

        if result.succeeded:
            if output:
                logger.info(f"Command output:\n{output}")
        else:
            logger.error(f"Command exited with code {result.exit_code}.")
            if output:
                logger.error(output)

        return result
