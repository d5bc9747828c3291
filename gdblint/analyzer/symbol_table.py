"""Hash-chained symbol tables for definitions and references."""
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Deque, Iterator, List, Optional, Tuple

HASH_SIZE = 1024

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


class SymbolKind(IntEnum):
    """Kind of a GDB identifier. Values are the cache's integer tags."""
    VARIABLE = 0
    FUNCTION = 1

    @property
    def label(self) -> str:
        """Short name used in diagnostics."""
        return "func" if self is SymbolKind.FUNCTION else "var"


@dataclass
class Symbol:
    """A named GDB identifier.

    source_line == 0 marks a symbol supplied by the GDB environment
    (register, convenience variable); any other value is the logical line
    where the script defines or references it.
    """
    name: str
    kind: SymbolKind
    source_line: int = 0

    @property
    def from_environment(self) -> bool:
        return self.source_line == 0


def fnv1a(name: str) -> int:
    """32-bit FNV-1a hash of `name` reduced to a bucket index."""
    value = FNV_OFFSET_BASIS
    for byte in name.encode("utf-8"):
        value ^= byte
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value % HASH_SIZE


class SymbolTable:
    """Fixed bucket array of symbol chains.

    Within a bucket the most recently inserted symbol comes first, so
    find() returns the newest match. Identical (name, kind, line) triples
    may coexist unless the table is created with check_duplicates=True.
    """

    def __init__(self, check_duplicates: bool = False):
        self.check_duplicates = check_duplicates
        self._buckets: List[Deque[Symbol]] = [deque() for _ in range(HASH_SIZE)]
        self._count = 0

    def insert(self, name: str, kind: SymbolKind, source_line: int = 0) -> Optional[Symbol]:
        """Add a symbol to the front of its bucket chain.

        Args:
            name: Identifier without sigil
            kind: FUNCTION or VARIABLE
            source_line: Logical line number, 0 for environment symbols

        Returns:
            The inserted symbol, the existing one when duplicate checking
            finds an identical entry, or None for an empty name
        """
        if not name:
            return None

        chain = self._buckets[fnv1a(name)]

        if self.check_duplicates:
            for existing in chain:
                if (existing.name == name and existing.kind == kind
                        and existing.source_line == source_line):
                    return existing

        symbol = Symbol(name, SymbolKind(kind), source_line)
        chain.appendleft(symbol)
        self._count += 1
        return symbol

    def insert_at(self, bucket: int, symbol: Symbol):
        """Insert a symbol read back from a stored bucket index.

        Raises:
            ValueError: If `bucket` is not where `symbol.name` hashes to
        """
        if bucket != fnv1a(symbol.name):
            raise ValueError(
                f"Symbol '{symbol.name}' belongs to bucket {fnv1a(symbol.name)}, not {bucket}"
            )
        self._buckets[bucket].appendleft(symbol)
        self._count += 1

    def find(self, name: str, kind: Optional[SymbolKind] = None) -> Optional[Symbol]:
        """Return the first symbol named `name` of the given kind (None = any kind)."""
        for symbol in self._buckets[fnv1a(name)]:
            if symbol.name != name:
                continue
            if kind is not None and symbol.kind != kind:
                continue
            return symbol
        return None

    def __contains__(self, item: Tuple[str, Optional[SymbolKind]]) -> bool:
        name, kind = item
        return self.find(name, kind) is not None

    def __iter__(self) -> Iterator[Tuple[int, Symbol]]:
        """Yield (bucket_index, symbol) in bucket order, then chain order."""
        for index, chain in enumerate(self._buckets):
            for symbol in chain:
                yield index, symbol

    def symbols(self) -> Iterator[Symbol]:
        for _, symbol in self:
            yield symbol

    def environment_symbols(self) -> Iterator[Tuple[int, Symbol]]:
        """Yield only the environment-derived entries (source_line == 0)."""
        for index, symbol in self:
            if symbol.from_environment:
                yield index, symbol

    def __len__(self) -> int:
        return self._count
