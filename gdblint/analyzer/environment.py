"""GDB environment introspection.

Runs `gdb -batch` to list built-in commands, registers, convenience
variables and target architectures. Any object exposing the four query_*
methods can stand in for GdbEnvironment (tests use an in-memory fake).
"""
import logging
import platform
import re
import subprocess
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

ARCH_MARKER = "Valid arguments are "
INTERNAL_FUNCTION = "internal function"
HELP_SEPARATOR = " -- "

_NAME_DELIMITERS = re.compile(r'[,\s]+')
_REGISTER_NAME = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')


class EnvironmentUnavailableError(RuntimeError):
    """GDB could not be run or produced nothing usable."""


def parse_architectures(output: str) -> List[str]:
    """Extract architecture names from `set architecture` error output."""
    archs = []
    for line in output.splitlines():
        at = line.find(ARCH_MARKER)
        if at < 0:
            continue
        for name in line[at + len(ARCH_MARKER):].split(','):
            name = name.strip().rstrip('.')
            if name and not name.startswith('--'):
                archs.append(name)
    return archs


def parse_commands(output: str) -> List[str]:
    """Extract command names and aliases from `help all` output.

    Command lines look like `break, brea, b -- Set breakpoint ...`; only the
    first word of each comma-separated alias is kept.
    """
    names = []
    for line in output.splitlines():
        if not line or not ('a' <= line[0] <= 'z'):
            continue
        head = line.split(HELP_SEPARATOR, 1)[0]
        for alias in head.split(','):
            words = alias.split()
            if words and words[0] not in names:
                names.append(words[0])
    return names


def parse_convenience_variables(output: str) -> List[str]:
    """Extract `$name` entries from `show convenience` output, skipping internal functions."""
    names = []
    for line in output.splitlines():
        if not line.startswith('$') or INTERNAL_FUNCTION in line:
            continue
        name = _NAME_DELIMITERS.split(line[1:], 1)[0]
        if name:
            names.append(name)
    return names


def parse_registers(output: str) -> List[str]:
    """Extract register names from `maintenance print [user-]registers` tables.

    Header rows start with a capitalized column title and are skipped. In the
    user-registers table the name follows a numeric column.
    """
    names = []
    for line in output.splitlines():
        columns = line.split()
        if not columns or columns[0][0].isupper():
            continue

        name = columns[0]
        if name.isdigit() and len(columns) > 1:
            name = columns[1]

        if _REGISTER_NAME.fullmatch(name) and name not in names:
            names.append(name)
    return names


def system_architecture() -> str:
    """Machine name of the host, spelled the way GDB spells it (x86_64 -> x86-64)."""
    return platform.machine().replace('_', '-')


def resolve_architecture(requested: Optional[str], available: Sequence[str]) -> str:
    """Map a requested (or host) architecture onto a name GDB accepts.

    Args:
        requested: Architecture given by the user, or None for the host
        available: Names reported by query_architectures()

    Returns:
        The first available name containing the requested one, else the
        requested name itself, else "auto"
    """
    hint = (requested or system_architecture() or "").replace('_', '-')
    if not hint:
        return "auto"
    for arch in available:
        if hint in arch:
            return arch
    return requested or "auto"


class GdbEnvironment:
    """Query a GDB installation in batch mode."""

    def __init__(self, gdb: str = "gdb", timeout: float = 30.0):
        """Initialize environment adapter.

        Args:
            gdb: GDB executable name or path
            timeout: Seconds allowed per GDB invocation
        """
        self.gdb = gdb
        self.timeout = timeout

    def _run(self, *commands: str, merge_stderr: bool = False) -> str:
        """Run gdb -batch with one -ex per command and return its output.

        Raises:
            EnvironmentUnavailableError: If GDB cannot be started or times out
        """
        argv = [self.gdb, "-nx", "-batch"]
        for command in commands:
            argv.extend(["-ex", command])

        logger.debug("running: %s", " ".join(argv))
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.DEVNULL,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise EnvironmentUnavailableError(f"GDB executable not found: {self.gdb}") from e
        except subprocess.TimeoutExpired as e:
            raise EnvironmentUnavailableError(
                f"GDB did not finish within {self.timeout:g}s"
            ) from e
        except OSError as e:
            raise EnvironmentUnavailableError(f"Failed to run GDB: {e}") from e

        return result.stdout or ""

    @staticmethod
    def _require(names: List[str], what: str) -> List[str]:
        if not names:
            raise EnvironmentUnavailableError(f"GDB reported no {what}")
        return names

    def query_architectures(self) -> List[str]:
        # `set architecture` without an argument fails and lists the valid ones
        output = self._run("set architecture", merge_stderr=True)
        return self._require(parse_architectures(output), "architectures")

    def query_commands(self) -> List[str]:
        return self._require(parse_commands(self._run("help all")), "commands")

    def query_convenience_variables(self) -> List[str]:
        # Without a live inferior GDB may legitimately list none
        return parse_convenience_variables(self._run("show convenience"))

    def query_registers(self, architecture: Optional[str] = None) -> List[str]:
        output = self._run(
            f"set architecture {architecture or 'auto'}",
            "maintenance print registers",
            "maintenance print user-registers",
        )
        return self._require(parse_registers(output), "registers")
