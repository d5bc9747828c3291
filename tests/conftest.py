"""Shared fixtures: an in-memory GDB environment and an isolated cache directory."""
from pathlib import Path

import pytest

from gdblint.analyzer.environment import EnvironmentUnavailableError
from gdblint.config import reset_config


FIXTURES_DIR = Path(__file__).parent / "fixtures"

GDB_COMMANDS = [
    "break", "b", "continue", "c", "define", "document", "echo", "end",
    "if", "while", "info", "print", "p", "printf", "python", "run",
    "set", "shell", "source", "bt", "backtrace", "x", "commands",
]
GDB_REGISTERS = ["rax", "rbx", "rip", "rsp", "pc", "sp"]
GDB_CONVENIENCE = ["bpnum", "_siginfo"]
GDB_ARCHITECTURES = ["i386", "i386:x86-64", "i386:x64-32", "auto"]


class FakeEnvironment:
    """Stands in for GdbEnvironment; counts calls and can simulate failures."""

    def __init__(self, commands=None, registers=None, convenience=None,
                 architectures=None, fail=False):
        self.commands = list(GDB_COMMANDS if commands is None else commands)
        self.registers = list(GDB_REGISTERS if registers is None else registers)
        self.convenience = list(GDB_CONVENIENCE if convenience is None else convenience)
        self.architectures = list(GDB_ARCHITECTURES if architectures is None else architectures)
        self.fail = fail
        self.calls = []
        self.register_arch = None

    def _answer(self, what, value):
        self.calls.append(what)
        if self.fail:
            raise EnvironmentUnavailableError("gdb not installed")
        return list(value)

    def query_commands(self):
        return self._answer("commands", self.commands)

    def query_registers(self, architecture=None):
        self.register_arch = architecture
        return self._answer("registers", self.registers)

    def query_convenience_variables(self):
        return self._answer("convenience", self.convenience)

    def query_architectures(self):
        return self._answer("architectures", self.architectures)


@pytest.fixture
def fake_env():
    """A healthy fake GDB environment."""
    return FakeEnvironment()


@pytest.fixture
def broken_env():
    """A fake environment whose every query fails."""
    return FakeEnvironment(fail=True)


@pytest.fixture
def cache_dir(tmp_path, monkeypatch):
    """Point the configured cache at a temporary directory."""
    directory = tmp_path / "cache"
    monkeypatch.setenv("GDBLINT_CACHE_DIR", str(directory))
    monkeypatch.delenv("GDBLINT_CHECK_DUPLICATES", raising=False)
    reset_config()
    yield directory
    reset_config()
