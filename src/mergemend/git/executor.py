"""Run git as a subprocess and capture a structured result."""

import shlex
import shutil
from pathlib import Path

from invoke.exceptions import ThreadException

from mergemend.core.config import GitConfig
from mergemend.core.log import NullLogger
from mergemend.core.result import CommandResult
from mergemend.core.runner import Runner

TIMED_OUT = "Command timed out"


class GitExecutor:
    """Invoke git with a fixed argument vector.

    Never raises: timeouts, launch failures and non-zero exits are all
    reported through CommandResult. No retries.
    """

    def __init__(
        self,
        config: GitConfig | None = None,
        logger=None,
        runner: Runner | None = None,
    ):
        """Initialize executor.

        Args:
            config: Executable, timeout and output cap
            logger: Logger for command tracing
            runner: invoke runner to use (a fresh Runner by default)
        """
        self.config = config or GitConfig()
        self.logger = logger or NullLogger()
        self.runner = runner or Runner()

    def _clip(self, text: str) -> str:
        return text[:self.config.max_output_size].strip()

    def run(
        self,
        args: list[str],
        cwd: Path | str | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run `git <args>` and return its outcome.

        Args:
            args: Arguments after the executable
            cwd: Working directory (process cwd when None)
            env: Extra environment variables

        Returns:
            CommandResult with trimmed, size-capped stdout and stderr
        """
        executable = shutil.which(self.config.executable)
        if executable is None:
            self.logger.warn(
                "git executable not found",
                executable=self.config.executable,
            )
            return CommandResult(
                success=False,
                stderr=f"{self.config.executable}: executable not found",
                exit_code=-1,
            )

        command = " ".join(shlex.quote(part) for part in [executable, *args])
        try:
            result, timed_out = self.runner.execute(
                command,
                cwd=cwd,
                timeout=self.config.timeout,
                check=False,
                env=env,
            )
        except (OSError, ThreadException) as e:
            self.logger.warn(
                "git failed to start", args=args, error=str(e)
            )
            return CommandResult(success=False, stderr=str(e), exit_code=-1)

        stdout = self._clip(result.stdout or "")
        if timed_out:
            self.logger.warn(
                "git command timed out",
                args=args,
                timeout=self.config.timeout,
            )
            return CommandResult(
                success=False, stdout=stdout, stderr=TIMED_OUT, exit_code=-1
            )

        self.logger.debug(
            "git command finished",
            args=args,
            cwd=str(cwd) if cwd else None,
            exit_code=result.exited,
        )
        return CommandResult(
            success=result.exited == 0,
            stdout=stdout,
            stderr=self._clip(result.stderr or ""),
            exit_code=result.exited,
        )
