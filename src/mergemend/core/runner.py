"""Command execution on top of invoke."""

import shlex
from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut


class Runner(Context):
    """invoke.Context with a single captured-output execute() call."""

    def execute(
        self,
        command: str,
        cwd: Path | str | None = None,
        timeout: int | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
    ) -> tuple[Result, bool]:
        """Run a shell command and capture its output.

        Args:
            command: Command string, already quoted for the shell
            cwd: Working directory for the command
            timeout: Seconds before the process is killed
            check: Raise invoke.UnexpectedExit on non-zero exit
            env: Variables added to (not replacing) os.environ

        Returns:
            (invoke.Result, timed_out). A timed-out command keeps
            whatever output was captured before the kill.
        """
        kwargs = {
            "hide": True,
            "warn": not check,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if env:
            kwargs["env"] = env

        # Context.cd only escapes spaces, so the directory is quoted here.
        if cwd:
            command = f"cd {shlex.quote(str(cwd))} && {command}"

        try:
            return self.run(command, **kwargs), False
        except CommandTimedOut as e:
            return e.result, True
