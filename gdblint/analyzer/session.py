"""Per-run lint state and orchestration.

A LintSession owns the definitions and references tables, the command trie
and the cache handle for one invocation. The run has three phases:

1. Environment: seed built-in commands, registers and convenience
   variables from the cache or from GDB.
2. Extraction: assemble logical lines, then collect definitions and
   references.
3. Reporting: diff the two tables.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .cache import EnvironmentCache
from .classifier import TokenClassifier
from .command_trie import CommandTrie
from .environment import EnvironmentUnavailableError, resolve_architecture
from .extractor import DefinitionExtractor
from .lines import LineAssembler, LinesMap
from .reference_tracker import ReferenceExtractor
from .reporter import Diagnostic, IssueReporter, WarningFilter
from .symbol_table import Symbol, SymbolKind, SymbolTable

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_GDB = "gdb"
SOURCE_NONE = "none"

# Not listed by `help all` but valid inside breakpoint command lists
BUILTIN_COMMANDS = ("silent",)

# Convenience variables GDB sets on demand, so `show convenience` may miss them
BUILTIN_CONVENIENCE_VARIABLES = (
    "_", "__",
    "_exitcode", "_exitsignal", "_exception", "_ada_exception",
    "_probe_argc",
    *(f"_probe_arg{i}" for i in range(12)),
    "_sdata", "_siginfo", "_thread", "_gthread", "_inferior_thread_count",
    "_gdb_major", "_gdb_minor", "_shell_exitcode", "_shell_exitsignal",
    "bpnum", "cdir",
)


def _unique(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for name in names:
        if name and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


@dataclass
class LintResult:
    """Outcome of linting one script."""
    lines: LinesMap
    definitions: List[Symbol] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def line_number_width(self) -> int:
        return self.lines.line_number_width


class LintSession:
    """Explicit state for one gdblint invocation."""

    def __init__(self, cache: Optional[EnvironmentCache] = None, environment=None,
                 check_duplicates: bool = False):
        """Initialize session.

        Args:
            cache: Environment cache, or None to never read or write one
            environment: Object with query_commands(), query_registers(arch),
                query_convenience_variables() and query_architectures(),
                or None when GDB is not to be consulted
            check_duplicates: Skip identical symbols on insertion
        """
        self.cache = cache
        self.environment = environment
        self.definitions = SymbolTable(check_duplicates=check_duplicates)
        self.references = SymbolTable(check_duplicates=check_duplicates)
        self.commands = CommandTrie()
        self.architecture: Optional[str] = None
        self.environment_source = SOURCE_NONE
        # Operator-facing warnings collected during the run
        self.notices: List[str] = []

    # --- Phase 1: environment ---

    def _add_commands(self, names: Iterable[str]):
        for name in names:
            try:
                self.commands.insert(name)
            except ValueError:
                logger.debug("skipping command with unsupported characters: %r", name)

    def _query_optional(self, what: str, query, *args) -> List[str]:
        """Run one environment query whose failure only empties its category."""
        try:
            return query(*args)
        except EnvironmentUnavailableError as e:
            self.notices.append(f"Could not list GDB {what}: {e}")
            return []

    def seed_from_environment(self, architecture: Optional[str] = None) -> bool:
        """Query GDB and seed the trie and definitions table.

        Commands are required; registers, convenience variables and the
        architecture list degrade to empty on failure. Nothing is inserted
        unless the command query succeeds.

        Returns:
            True if the environment answered the command query
        """
        if self.environment is None:
            return False

        try:
            commands = self.environment.query_commands()
        except EnvironmentUnavailableError as e:
            self.notices.append(f"GDB environment unavailable: {e}")
            return False

        archs = self._query_optional("architectures", self.environment.query_architectures)
        self.architecture = resolve_architecture(architecture, archs)
        logger.debug("architecture: %s", self.architecture)

        registers = self._query_optional(
            "registers", self.environment.query_registers, self.architecture
        )
        convenience = self._query_optional(
            "convenience variables", self.environment.query_convenience_variables
        )

        self._add_commands(_unique(list(commands) + list(BUILTIN_COMMANDS)))
        variables = _unique(list(registers) + list(convenience) + list(BUILTIN_CONVENIENCE_VARIABLES))
        for name in variables:
            self.definitions.insert(name, SymbolKind.VARIABLE, 0)

        return True

    def _load_cache(self) -> bool:
        return self.cache is not None and self.cache.load(
            self.definitions, self.references, self.commands
        )

    def save_cache(self) -> bool:
        """Persist environment-derived state; failures become notices."""
        if self.cache is None:
            return False
        try:
            self.cache.save(self.definitions, self.references, self.commands)
        except OSError as e:
            self.notices.append(f"Could not write cache {self.cache.cache_file}: {e}")
            return False
        return True

    def prepare_environment(self, refresh: bool = False,
                            architecture: Optional[str] = None) -> str:
        """Seed environment symbols, preferring the cache.

        The cache is tried first unless a refresh or a specific architecture
        is requested. A successful GDB query is written back to the cache,
        except for an explicit architecture: the cache holds the default
        architecture's registers only.
        When GDB fails the cache is the fallback, and when both fail the run
        continues with empty environment tables.

        Returns:
            SOURCE_CACHE, SOURCE_GDB or SOURCE_NONE
        """
        cache_first = not refresh and architecture is None

        if cache_first and self._load_cache():
            self.environment_source = SOURCE_CACHE
        elif self.seed_from_environment(architecture):
            self.environment_source = SOURCE_GDB
            if architecture is None:
                self.save_cache()
            else:
                logger.debug("not caching registers for architecture %s", self.architecture)
        elif not cache_first and self._load_cache():
            self.environment_source = SOURCE_CACHE
        else:
            self.environment_source = SOURCE_NONE
            self.notices.append(
                "No GDB environment data available; built-in commands and "
                "registers may be reported as undefined"
            )

        logger.debug("environment source: %s", self.environment_source)
        return self.environment_source

    def list_architectures(self) -> List[str]:
        """Architectures GDB accepts for `set architecture`.

        Raises:
            EnvironmentUnavailableError: If no environment is configured or GDB fails
        """
        if self.environment is None:
            raise EnvironmentUnavailableError("No GDB environment configured")
        return self.environment.query_architectures()

    # --- Phases 2 and 3: extraction and reporting ---

    def lint(self, physical_lines: Iterable[str],
             warnings: Optional[WarningFilter] = None,
             sort_by_line: bool = False) -> LintResult:
        """Lint one script.

        Args:
            physical_lines: Script lines as read from the file
            warnings: Suppression flags
            sort_by_line: Order diagnostics by line number

        Returns:
            LintResult with the logical lines and diagnostics
        """
        lines = LineAssembler().assemble(physical_lines)

        definitions = DefinitionExtractor(self.definitions).extract(lines)
        classifier = TokenClassifier(self.commands)
        ReferenceExtractor(self.references, classifier).extract(lines)

        reporter = IssueReporter(
            self.definitions, self.references, warnings=warnings, sort_by_line=sort_by_line
        )
        return LintResult(lines=lines, definitions=definitions, diagnostics=reporter.report())
