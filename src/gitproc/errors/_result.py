"""Captured outcome of a finished git process."""

from dataclasses import dataclass
from typing import ClassVar, Final


@dataclass(frozen=True, slots=True)
class ExecuteResult:
    """Exit code and captured output of a git process.

    Attributes:
        exit_code: Process exit code; -1 when the process was canceled.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    CANCELED: ClassVar["ExecuteResult"]

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def stderr_lines(self) -> list[str]:
        """Non-blank lines of standard error, trimmed."""
        return [line.strip() for line in self.stderr.splitlines() if line.strip()]

    def __str__(self) -> str:
        return f"ExitCode : {self.exit_code}\n{self.stderr}"


CANCELED: Final = ExecuteResult(-1, stderr="task canceled.")
ExecuteResult.CANCELED = CANCELED
