"""mergemend CLI - inspect and resolve git merge conflicts."""

import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from mergemend.command import (
    AbortCommand,
    AcceptCommand,
    DetectCommand,
    NavigateCommand,
    ResolveCommand,
    ResumeCommand,
    ShowCommand,
    SuggestCommand,
)
from mergemend.core.config import State


class CliState(State):
    """Inspect and resolve git merge conflicts.

    Works during a merge, rebase, cherry-pick or revert. Every
    subcommand prints a JSON result ({"success": true, "data": ...}
    or {"success": false, "error": ...}) and exits 0 or 1.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.git.timeout 60)
    2. --include files, ./mergemend.yaml, the user config file and
       the packaged defaults
    3. .env file
    4. Environment variables (MERGEMEND_CONFIG__GIT__TIMEOUT=60)
    """

    detect: CliSubCommand[DetectCommand]
    show: CliSubCommand[ShowCommand]
    resolve: CliSubCommand[ResolveCommand]
    accept: CliSubCommand[AcceptCommand]
    abort: CliSubCommand[AbortCommand]
    resume: CliSubCommand[ResumeCommand]
    navigate: CliSubCommand[NavigateCommand]
    suggest: CliSubCommand[SuggestCommand]

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Closing the state closes the logger and its sinks.
        with self:
            exit_code = subcommand.run(self)
        raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
