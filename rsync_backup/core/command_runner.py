from __future__ import annotations

import subprocess

from .command_builder import RsyncCommand


class CommandRunner:
    """Run one transfer to completion.

    rsync's per-file listing on stdout is discarded; stderr is kept for the
    failure reason and decoded leniently since file names need not be UTF-8.
    """

    def run(self, command: RsyncCommand) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            command.argv,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            check=False,
        )
