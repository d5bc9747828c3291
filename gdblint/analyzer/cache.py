"""Environment cache for repeat lint runs.

Querying GDB for its commands, registers and convenience variables takes a
noticeable fraction of a second per invocation. The results are stored so
later runs can seed the symbol tables without starting GDB.

Only environment-derived symbols (source_line == 0) are stored; anything
discovered in a script is recomputed every run.

Cache Format (plain text, one file per installation):

    defs <n>
    <bucket>,<name>,<kind>,0        n rows
    refs <m>
    <bucket>,<name>,<kind>,0        m rows
    cmds <length>
    <encoded command trie>          exactly <length> characters

A store that fails validation anywhere is ignored as a whole.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from .command_trie import CommandTrie
from .symbol_table import HASH_SIZE, Symbol, SymbolKind, SymbolTable, fnv1a

logger = logging.getLogger(__name__)

SECTION_DEFS = "defs"
SECTION_REFS = "refs"
SECTION_CMDS = "cmds"

Row = Tuple[int, Symbol]


class CacheFormatError(ValueError):
    """The cache file does not follow the expected layout."""


@dataclass
class CacheSnapshot:
    """Fully validated cache contents, not yet applied to any table."""
    definitions: List[Row] = field(default_factory=list)
    references: List[Row] = field(default_factory=list)
    commands: CommandTrie = field(default_factory=CommandTrie)


class _LineReader:
    """Sequential access to cache lines with positional error messages."""

    def __init__(self, text: str):
        self.lines = text.split('\n')
        if self.lines and self.lines[-1] == '':
            self.lines.pop()
        self.position = 0

    def next(self, what: str) -> str:
        if self.position >= len(self.lines):
            raise CacheFormatError(f"Unexpected end of cache while reading {what}")
        line = self.lines[self.position]
        self.position += 1
        return line

    def at_end(self) -> bool:
        return self.position >= len(self.lines)


def _parse_header(line: str, section: str) -> int:
    """Validate a `<section> <count>` line and return the count."""
    parts = line.split(' ')
    if len(parts) != 2 or parts[0] != section:
        raise CacheFormatError(f"Expected section '{section}', found {line!r}")
    try:
        count = int(parts[1])
    except ValueError:
        raise CacheFormatError(f"Invalid count in section header {line!r}")
    if count < 0:
        raise CacheFormatError(f"Negative count in section header {line!r}")
    return count


def _parse_row(line: str) -> Row:
    """Validate a `bucket,name,kind,line` row."""
    parts = line.split(',')
    if len(parts) != 4:
        raise CacheFormatError(f"Malformed row {line!r}")

    bucket_text, name, kind_text, source_line_text = parts
    try:
        bucket = int(bucket_text)
        kind = SymbolKind(int(kind_text))
        source_line = int(source_line_text)
    except ValueError:
        raise CacheFormatError(f"Malformed row {line!r}")

    if not name:
        raise CacheFormatError(f"Empty symbol name in row {line!r}")
    if not 0 <= bucket < HASH_SIZE or bucket != fnv1a(name):
        raise CacheFormatError(f"Bucket {bucket} does not match symbol '{name}'")
    if source_line != 0:
        raise CacheFormatError(f"Script symbol '{name}' found in cache")

    return bucket, Symbol(name, kind, source_line)


def _format_rows(section: str, table: SymbolTable) -> List[str]:
    rows = [
        f"{bucket},{symbol.name},{int(symbol.kind)},{symbol.source_line}"
        for bucket, symbol in table.environment_symbols()
    ]
    return [f"{section} {len(rows)}"] + rows


class EnvironmentCache:
    """Durable store of environment-derived symbols and the command trie."""

    def __init__(self, cache_file: Path):
        """Initialize cache handle. Nothing is read or created yet.

        Args:
            cache_file: Path of the single cache file
        """
        self.cache_file = Path(cache_file)

    @property
    def exists(self) -> bool:
        return self.cache_file.is_file()

    def read_snapshot(self) -> CacheSnapshot:
        """Parse and validate the whole cache file.

        Raises:
            OSError: If the file cannot be read
            CacheFormatError: If any section is malformed
        """
        with open(self.cache_file, 'r', encoding='utf-8', newline='') as f:
            text = f.read()

        if not text:
            raise CacheFormatError("Cache file is empty")

        reader = _LineReader(text)
        snapshot = CacheSnapshot()

        for section, rows in ((SECTION_DEFS, snapshot.definitions),
                              (SECTION_REFS, snapshot.references)):
            count = _parse_header(reader.next(f"'{section}' header"), section)
            for _ in range(count):
                rows.append(_parse_row(reader.next(f"'{section}' rows")))

        length = _parse_header(reader.next(f"'{SECTION_CMDS}' header"), SECTION_CMDS)
        encoded = reader.next("command trie")
        if len(encoded) != length:
            raise CacheFormatError(
                f"Command trie length {len(encoded)} does not match header {length}"
            )
        try:
            snapshot.commands = CommandTrie.decode(encoded)
        except ValueError as e:
            raise CacheFormatError(f"Invalid command trie: {e}")

        if not reader.at_end():
            raise CacheFormatError("Unexpected data after command trie")

        return snapshot

    def load(self, definitions: SymbolTable, references: SymbolTable,
             commands: CommandTrie) -> bool:
        """Seed tables and the command trie from the cache.

        Nothing is applied unless the entire file validates.

        Returns:
            True if the cache was present and valid
        """
        try:
            snapshot = self.read_snapshot()
        except FileNotFoundError:
            logger.debug("no cache at %s", self.cache_file)
            return False
        except (OSError, UnicodeDecodeError, CacheFormatError) as e:
            logger.debug("discarding cache %s: %s", self.cache_file, e)
            return False

        # Rows were written newest-first within each bucket; inserting in
        # reverse restores the same chain order.
        for bucket, symbol in reversed(snapshot.definitions):
            definitions.insert_at(bucket, symbol)
        for bucket, symbol in reversed(snapshot.references):
            references.insert_at(bucket, symbol)
        commands.update(snapshot.commands.names())

        logger.debug(
            "loaded cache: %d defs, %d refs, %d commands",
            len(snapshot.definitions), len(snapshot.references), len(snapshot.commands),
        )
        return True

    def render(self, definitions: SymbolTable, references: SymbolTable,
               commands: CommandTrie) -> str:
        """Produce the cache file contents for the given state."""
        encoded = commands.encode()
        lines = (
            _format_rows(SECTION_DEFS, definitions)
            + _format_rows(SECTION_REFS, references)
            + [f"{SECTION_CMDS} {len(encoded)}", encoded]
        )
        return "\n".join(lines) + "\n"

    def save(self, definitions: SymbolTable, references: SymbolTable,
             commands: CommandTrie):
        """Overwrite the cache with the environment-derived state.

        Written to a temporary file first, then renamed over the old cache.

        Raises:
            OSError: If the cache directory or file cannot be written
        """
        content = self.render(definitions, references, commands)

        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.cache_file.with_name(self.cache_file.name + '.tmp')
        try:
            with open(temp_path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            temp_path.replace(self.cache_file)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug("saved cache to %s", self.cache_file)

    def clear(self) -> bool:
        """Delete the cache file.

        Returns:
            True if a cache file existed and was removed
        """
        try:
            self.cache_file.unlink()
        except FileNotFoundError:
            return False
        return True

    def stats(self) -> Dict[str, object]:
        """Get cache statistics."""
        stats = {
            'path': str(self.cache_file),
            'exists': self.exists,
            'valid': False,
            'definitions': 0,
            'references': 0,
            'commands': 0,
        }
        if not stats['exists']:
            return stats

        try:
            snapshot = self.read_snapshot()
        except (OSError, UnicodeDecodeError, CacheFormatError) as e:
            stats['error'] = str(e)
            return stats

        stats.update(
            valid=True,
            definitions=len(snapshot.definitions),
            references=len(snapshot.references),
            commands=len(snapshot.commands),
        )
        return stats
