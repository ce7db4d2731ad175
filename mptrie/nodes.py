"""Trie node kinds, their rendering and hashing, and nibble-path helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, NamedTuple

from .keccak import keccak256

BRANCH_WIDTH = 17
VALUE_SLOT = 16
NO_NIBBLE = 0xFF


class NodeType(Enum):
    """Kind of node a packed path belongs to."""

    LEAF = 0
    EXT = 1


@dataclass(eq=False)
class Node:
    """Base of all trie nodes."""

    def hash_node(self) -> str:
        return "Node hash"

    def __str__(self) -> str:
        return "Node"


def _default_branches() -> List[Any]:
    return [None] * BRANCH_WIDTH


@dataclass(eq=False)
class Branch(Node):
    """A 17-way node: sixteen nibble slots and one value slot.

    Each slot is ``None``, a child ``Node``, a stored value, or the hex hash
    of a child node as a ``str``.
    """

    branches: List[Any] = field(default_factory=_default_branches)

    def __post_init__(self) -> None:
        self.branches = list(self.branches)
        if len(self.branches) != BRANCH_WIDTH:
            raise ValueError(
                f"a branch has {BRANCH_WIDTH} slots, got {len(self.branches)}"
            )

    def __str__(self) -> str:
        parts = []
        for item in self.branches:
            if item is None:
                parts.append("null, ")
            else:
                parts.append(f"{item}, ")
        return "[ " + "".join(parts) + " ]"

    def hash_node(self) -> str:
        parts = []
        for item in self.branches:
            if item is None:
                continue
            if isinstance(item, Node):
                parts.append(item.hash_node())
            else:
                parts.append(str(item))
        return keccak256("".join(parts)).hex()


@dataclass(eq=False)
class Extension(Node):
    """A shared path segment pointing at the node with hash ``hash``."""

    path: bytes = b""
    hash: str = ""

    def __post_init__(self) -> None:
        self.path = bytes(self.path)

    def __str__(self) -> str:
        return f"[ path: {to_hex_string(self.path)}hash: {self.hash} ]"

    def hash_node(self) -> str:
        return keccak256(str(self)).hex()


@dataclass(eq=False)
class Leaf(Node):
    """The remaining path of a key together with its value."""

    path: bytes = b""
    value: Any = None

    def __post_init__(self) -> None:
        self.path = bytes(self.path)

    def __str__(self) -> str:
        text = f"[ path: {to_hex_string(self.path)}"
        if self.value is not None:
            text += f" value: {self.value} ]"
        return text

    def hash_node(self) -> str:
        return keccak256(str(self)).hex()


def to_hex_string(data: Iterable[int]) -> str:
    """Render bytes as two-digit hex, each followed by a space."""
    return "".join(f"{byte:02x} " for byte in data)


def pack_nibbles(path: Iterable[int], node_type: NodeType) -> bytes:
    """Pack nibbles into bytes behind a prefix giving node kind and parity.

    Leaves start with 0x20 (even) or 0x3n (odd); extensions with 0x00
    (even) or 0x1n (odd). An empty path packs to nothing.
    """
    nibbles = list(path)
    if not nibbles:
        return b""
    odd = len(nibbles) % 2 == 1
    if node_type is NodeType.LEAF:
        flag = 0x30 if odd else 0x20
    else:
        flag = 0x10 if odd else 0x00
    packed = bytearray()
    if odd:
        packed.append((nibbles[0] | flag) & 0xFF)
        rest = nibbles[1:]
    else:
        packed.append(flag)
        rest = nibbles
    packed.extend(((high << 4) | low) & 0xFF for high, low in zip(rest[::2], rest[1::2]))
    return bytes(packed)


def kth_nibble(path: bytes, k: int) -> int:
    """Return nibble ``k`` of ``path``, or 0xFF when past its end."""
    if k >= 2 * len(path):
        return NO_NIBBLE
    byte = path[k // 2]
    return byte >> 4 if k % 2 == 0 else byte & 0x0F


class _CommonPrefix(NamedTuple):
    prefix: bytes
    key_suffix: bytes
    node_suffix: bytes
    key_index: int
    node_index: int


def find_common_prefix(node_path: bytes, key_path: bytes, start: int) -> _CommonPrefix:
    """Match a node's prefix-encoded path against a key from nibble ``start``.

    Returns the matched nibbles, the unmatched nibbles of key and node, and
    the nibble indices where matching stopped in each. With ``start`` 0 the
    key's own prefix nibbles are skipped.
    """
    node_path = bytes(node_path)
    key_path = bytes(key_path)
    if not node_path:
        raise ValueError("node path must not be empty")
    if start < 0:
        raise ValueError(f"start must not be negative, got {start}")

    parity = node_path[0] >> 4
    node_index = 2 if parity % 2 == 0 else 1
    key_index = start
    if start == 0:
        key_index = 2 if parity == 0 else 1

    node_end = 2 * len(node_path)
    key_end = 2 * len(key_path)
    prefix = bytearray()
    while node_index < node_end and key_index < key_end:
        node_nibble = kth_nibble(node_path, node_index)
        if node_nibble != kth_nibble(key_path, key_index):
            break
        prefix.append(node_nibble)
        node_index += 1
        key_index += 1

    node_suffix = bytes(kth_nibble(node_path, j) for j in range(node_index, node_end))
    key_suffix = bytes(kth_nibble(key_path, j) for j in range(key_index, key_end))
    return _CommonPrefix(bytes(prefix), key_suffix, node_suffix, key_index, node_index)


def suffix_nibbles(path: bytes, nibble: int) -> bytes:
    """Return the nibbles of ``path`` from index ``nibble`` to the end."""
    return bytes(kth_nibble(path, i) for i in range(nibble, 2 * len(path)))


def path_offset(path: bytes) -> int:
    """Index of the first nibble after a path's prefix: 2 if even, 1 if odd."""
    if not path:
        raise ValueError("path must not be empty")
    return 2 if (path[0] >> 4) % 2 == 0 else 1