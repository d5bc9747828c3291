"""Prefix tree recognizing GDB built-in command names.

Nodes live in an arena addressed by index; the root is node 0. Children are
keyed by alphabet slot, the character code minus the first printable
character, so the alphabet spans '!' through '~' (94 slots).
"""
from typing import Dict, Iterator, List, Tuple

ALPHABET_START = ord('!')
ALPHABET_END = ord('~')
ALPHABET_SIZE = ALPHABET_END - ALPHABET_START + 1

ROOT = 0

# Encoding markers. Space is outside the alphabet, so it can close a node.
_TERMINAL = '1'
_NON_TERMINAL = '0'
_CLOSE = ' '


def _slot(char: str) -> int:
    """Map a character to its child slot.

    Raises:
        ValueError: If the character is outside the printable alphabet
    """
    index = ord(char) - ALPHABET_START
    if not 0 <= index < ALPHABET_SIZE:
        raise ValueError(f"Character {char!r} is outside the command alphabet")
    return index


class CommandTrie:
    """Recognizer for whole command names."""

    def __init__(self):
        self._children: List[Dict[int, int]] = [{}]
        self._terminal: List[bool] = [False]

    def _new_node(self, terminal: bool = False) -> int:
        self._children.append({})
        self._terminal.append(terminal)
        return len(self._children) - 1

    def insert(self, name: str) -> int:
        """Add a command name, returning the index of its terminal node.

        Raises:
            ValueError: If `name` contains a character outside the alphabet
        """
        if not name:
            return ROOT

        slots = [_slot(char) for char in name]
        node = ROOT
        for slot in slots:
            child = self._children[node].get(slot)
            if child is None:
                child = self._new_node()
                self._children[node][slot] = child
            node = child

        self._terminal[node] = True
        return node

    def update(self, names):
        """Insert every name from an iterable."""
        for name in names:
            self.insert(name)

    def recognize(self, token: str) -> Tuple[int, bool]:
        """Walk `token` through the tree.

        Returns:
            (matched_prefix_length, is_whole_word_command). The second item
            is True only when the whole token was consumed and the walk
            ended on a terminal node.
        """
        node = ROOT
        matched = 0
        for char in token:
            index = ord(char) - ALPHABET_START
            child = self._children[node].get(index) if 0 <= index < ALPHABET_SIZE else None
            if child is None:
                break
            node = child
            matched += 1

        whole = bool(token) and matched == len(token) and self._terminal[node]
        return matched, whole

    def is_command(self, token: str) -> bool:
        return self.recognize(token)[1]

    def __contains__(self, token: str) -> bool:
        return self.is_command(token)

    def names(self) -> Iterator[str]:
        """Yield every inserted name in alphabet order."""
        stack = [(ROOT, "")]
        while stack:
            node, prefix = stack.pop()
            if self._terminal[node] and prefix:
                yield prefix
            for slot in sorted(self._children[node], reverse=True):
                stack.append((self._children[node][slot], prefix + chr(slot + ALPHABET_START)))

    def __len__(self) -> int:
        return sum(1 for node, terminal in enumerate(self._terminal) if terminal and node != ROOT)

    @property
    def node_count(self) -> int:
        return len(self._children)

    # --- Persistence ---

    def encode(self) -> str:
        """Serialize the tree to a single line of text.

        Each node is written as its terminal flag, then each child as the
        child's character followed by the child's own encoding, then a space
        closing the node. Children are written in slot order, so equal sets
        of names always encode identically.
        """
        parts: List[str] = []
        self._encode_node(ROOT, parts)
        return "".join(parts)

    def _encode_node(self, node: int, parts: List[str]):
        parts.append(_TERMINAL if self._terminal[node] else _NON_TERMINAL)
        for slot in sorted(self._children[node]):
            parts.append(chr(slot + ALPHABET_START))
            self._encode_node(self._children[node][slot], parts)
        parts.append(_CLOSE)

    @classmethod
    def decode(cls, text: str) -> "CommandTrie":
        """Rebuild a tree from encode() output.

        Raises:
            ValueError: If the text is truncated, malformed or has trailing data
        """
        if not text or text[0] not in (_TERMINAL, _NON_TERMINAL):
            raise ValueError("Encoded command trie must start with a terminal flag")

        trie = cls()
        trie._terminal[ROOT] = text[0] == _TERMINAL
        stack = [ROOT]
        pos = 1

        while stack:
            if pos >= len(text):
                raise ValueError("Encoded command trie is truncated")

            char = text[pos]
            pos += 1

            if char == _CLOSE:
                stack.pop()
                continue

            slot = _slot(char)
            parent = stack[-1]
            if slot in trie._children[parent]:
                raise ValueError(f"Duplicate child {char!r} in encoded command trie")
            if pos >= len(text) or text[pos] not in (_TERMINAL, _NON_TERMINAL):
                raise ValueError(f"Missing terminal flag after {char!r} at offset {pos}")

            child = trie._new_node(text[pos] == _TERMINAL)
            pos += 1
            trie._children[parent][slot] = child
            stack.append(child)

        if pos != len(text):
            raise ValueError(f"Unexpected data after encoded command trie at offset {pos}")

        return trie
