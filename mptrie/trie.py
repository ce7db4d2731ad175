"""Merkle Patricia trie keyed by prefix-encoded nibble paths."""

from __future__ import annotations

import argparse
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from .nodes import (
    VALUE_SLOT,
    Branch,
    Extension,
    Leaf,
    Node,
    NodeType,
    find_common_prefix,
    kth_nibble,
    pack_nibbles,
    path_offset,
    suffix_nibbles,
)
from .values import Int

logger = logging.getLogger(__name__)

KeyLike = Union[bytes, bytearray, Iterable[int]]
_Match = Tuple[bytes, bytes, bytes, int, int]


def _match(path: bytes, key: bytes, start: int) -> _Match:
    """Common-prefix match that also accepts a node whose path is empty."""
    if path:
        prefix, key_suffix, node_suffix, key_index, node_index = find_common_prefix(
            path, key, start
        )
        return prefix, key_suffix, node_suffix, key_index, node_index
    key_index = start if start else path_offset(key)
    return b"", suffix_nibbles(key, key_index), b"", key_index, 0


def _path_nibble_count(path: bytes) -> int:
    """Number of nibbles a prefix-encoded path holds after its prefix."""
    if not path:
        return 0
    return 2 * len(path) - path_offset(path)


def _to_leaf_odd(byte: int) -> int:
    return (byte | 0x30) & 0x3F


def _to_leaf_even(byte: int) -> int:
    return (byte | 0x20) & 0x2F


class Trie:
    """A trie whose nodes are stored in a hash-keyed database.

    Keys are bytes whose first nibble gives the parity of the remaining
    nibbles: 0 for an even count, 1 for an odd count.
    """

    def __init__(self) -> None:
        self.root: Optional[Node] = None
        self._db: dict[str, Node] = {}

    def insert(self, key: KeyLike, value: Any) -> Optional[Node]:
        """Store ``value`` under ``key`` and return the new root."""
        key_bytes = bytearray(key)
        if not key_bytes:
            raise ValueError("key must not be empty")
        self.root = self._insert(self.root, key_bytes, value, 0)
        return self.root

    def retrieve(self, key: KeyLike) -> Any:
        """Return the value stored under ``key``, or None if there is none."""
        key_bytes = bytes(key)
        if not key_bytes:
            return None

        end = 2 * len(key_bytes)
        index = path_offset(key_bytes)
        current = self.root

        while index < end:
            if current is None:
                return None

            if isinstance(current, Leaf):
                _, key_suffix, leaf_suffix, _, _ = _match(current.path, key_bytes, index)
                if not key_suffix and not leaf_suffix:
                    return current.value
                return None

            if isinstance(current, Extension):
                _, key_suffix, ext_suffix, index, _ = _match(current.path, key_bytes, index)
                if ext_suffix:
                    return None
                if not key_suffix:
                    target = self._db.get(current.hash)
                    if isinstance(target, Leaf):
                        return target.value if not target.path else None
                    if isinstance(target, Branch):
                        return self._slot_value(target)
                    return None
                current = self._db.get(current.hash)

            if isinstance(current, Branch):
                if index == end - 1:
                    return self._slot_value(current)
                child = current.branches[kth_nibble(key_bytes, index)]
                index += 1
                if child is None or isinstance(child, Node):
                    current = child
                elif isinstance(child, str):
                    current = self._db.get(child)
        return None

    def db_lines(self) -> List[str]:
        """Render every database entry as ``hash => node``."""
        return [
            f"{node_hash} => {node if node is not None else 'null'}"
            for node_hash, node in self._db.items()
        ]

    def print_db(self) -> None:
        """Print every database entry, one per line."""
        for line in self.db_lines():
            print(line)

    @staticmethod
    def _slot_value(branch: Branch) -> Any:
        item = branch.branches[VALUE_SLOT]
        return None if isinstance(item, Node) else item

    def _store(self, node: Node) -> None:
        self._db[node.hash_node()] = node

    def _forget(self, node_hash: str) -> None:
        self._db.pop(node_hash, None)

    def _insert(
        self, node: Optional[Node], key: bytearray, value: Any, nibble: int
    ) -> Optional[Node]:
        if nibble == 2 * len(key):
            return None
        nibble_offset = path_offset(key) if nibble == 0 else 0

        if node is None:
            return self._insert_new_leaf(key, value, nibble)
        if isinstance(node, Leaf):
            return self._insert_at_leaf(node, key, value, nibble)
        if isinstance(node, Extension):
            return self._insert_at_extension(node, key, value, nibble, nibble_offset)
        if isinstance(node, Branch):
            return self._insert_at_branch(node, key, value, nibble, nibble_offset)
        return node

    def _insert_new_leaf(self, key: bytearray, value: Any, nibble: int) -> Leaf:
        parity = key[0] >> 4
        suffix = bytearray()
        if nibble % 2 == 1:
            key[nibble // 2] = _to_leaf_odd(key[nibble // 2])
        elif nibble != 0:
            suffix.append(0x20)
        elif parity == 1:
            key[0] = _to_leaf_odd(key[0])
        else:
            key[0] = _to_leaf_even(key[0])
        suffix += key[nibble // 2:]

        leaf = Leaf(bytes(suffix), value)
        self._store(leaf)
        return leaf

    def _insert_at_leaf(
        self, leaf: Leaf, key: bytearray, value: Any, nibble: int
    ) -> Node:
        self._forget(leaf.hash_node())
        key_bytes = bytes(key)
        prefix, key_suffix, leaf_suffix, key_index, leaf_index = _match(
            leaf.path, key_bytes, nibble
        )

        if not key_suffix and not leaf_suffix:
            leaf.value = value
            self._store(leaf)
            return leaf

        extension = Extension(pack_nibbles(prefix, NodeType.EXT), "")
        branch = Branch()
        leaf_rest = pack_nibbles(leaf_suffix[1:], NodeType.LEAF)
        key_rest = pack_nibbles(key_suffix[1:], NodeType.LEAF)

        if leaf_suffix and key_suffix:
            old_leaf = Leaf(leaf_rest, leaf.value)
            new_leaf = Leaf(key_rest, value)
            branch.branches[kth_nibble(leaf.path, leaf_index)] = old_leaf.hash_node()
            branch.branches[kth_nibble(key_bytes, key_index)] = new_leaf.hash_node()
            self._store(old_leaf)
            self._store(new_leaf)
        elif key_suffix:
            new_leaf = Leaf(key_rest, value)
            branch.branches[kth_nibble(key_bytes, key_index)] = new_leaf.hash_node()
            branch.branches[VALUE_SLOT] = leaf.value
            self._store(new_leaf)
        else:
            old_leaf = Leaf(leaf_rest, leaf.value)
            branch.branches[kth_nibble(leaf.path, leaf_index)] = old_leaf.hash_node()
            branch.branches[VALUE_SLOT] = value
            self._store(old_leaf)

        extension.hash = branch.hash_node()
        self._store(branch)
        self._store(extension)
        return extension

    def _insert_at_extension(
        self,
        extension: Extension,
        key: bytearray,
        value: Any,
        nibble: int,
        nibble_offset: int,
    ) -> Node:
        prefix, key_suffix, ext_suffix, _, _ = _match(extension.path, bytes(key), nibble)

        if not key_suffix and not ext_suffix:
            target = self._db.get(extension.hash)
            if target is None:
                raise KeyError(f"no node stored under hash {extension.hash!r}")
            self._forget(target.hash_node())
            if isinstance(target, Leaf):
                target.value = value
                target.path = b""
                self._store(target)
            elif isinstance(target, Branch):
                target.branches[VALUE_SLOT] = value
                self._store(target)
            extension.hash = target.hash_node()
            self._store(extension)
            return extension

        if key_suffix and not ext_suffix:
            jump = nibble + _path_nibble_count(extension.path) + nibble_offset
            child = self._insert(self._db.get(extension.hash), key, value, jump)
            if child is None:
                raise ValueError("key ends inside an extension path")
            self._forget(extension.hash)
            self._store(child)
            self._forget(extension.hash_node())
            extension.hash = child.hash_node()
            self._store(extension)
            return extension

        logger.debug("partial match in extension")
        self._forget(extension.hash_node())
        branch = Branch()
        tail = Extension(pack_nibbles(ext_suffix[1:], NodeType.EXT), extension.hash)

        if key_suffix:
            leaf = Leaf(pack_nibbles(key_suffix[1:], NodeType.LEAF), value)
            branch.branches[key_suffix[0]] = leaf.hash_node()
            self._store(leaf)
        else:
            branch.branches[VALUE_SLOT] = value
        branch.branches[ext_suffix[0]] = tail.hash_node()

        extension.path = pack_nibbles(prefix, NodeType.EXT)
        extension.hash = branch.hash_node()
        self._store(extension)
        self._store(branch)
        self._store(tail)
        return extension

    def _insert_at_branch(
        self,
        branch: Branch,
        key: bytearray,
        value: Any,
        nibble: int,
        nibble_offset: int,
    ) -> Node:
        self._forget(branch.hash_node())

        if nibble == 2 * len(key) - 1:
            branch.branches[VALUE_SLOT] = value
        else:
            if nibble == 0:
                nibble += nibble_offset
            slot = kth_nibble(bytes(key), nibble)
            child = branch.branches[slot]
            make_leaf = False

            if child is None or (isinstance(child, str) and not child):
                make_leaf = True
            elif isinstance(child, (Node, str)):
                target = child if isinstance(child, Node) else self._db.get(child)
                updated = self._insert(target, key, value, nibble + 1)
                if updated is None:
                    raise ValueError("key ends inside a branch")
                branch.branches[slot] = updated.hash_node()

            if make_leaf:
                rest = pack_nibbles(suffix_nibbles(bytes(key), nibble + 1), NodeType.LEAF)
                leaf = Leaf(rest, value)
                branch.branches[slot] = leaf.hash_node()
                self._store(leaf)

        self._store(branch)
        return branch


_DEMO_ENTRIES: Sequence[Tuple[bytes, int]] = (
    (bytes([0x12, 0x01, 0x34, 0x25]), 1),
    (bytes([0x12, 0x01]), 2),
    (bytes([0x12, 0x01, 0x67]), 3),
)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Build a small trie, print its root and database, and look up a key."""
    parser = argparse.ArgumentParser(
        prog="mptrie",
        description="Build a sample trie and print its contents.",
    )
    parser.parse_args(argv)

    trie = Trie()
    for key, number in _DEMO_ENTRIES:
        trie.insert(key, Int(number))
    print(f"Root: {trie.root}")
    trie.print_db()

    found = trie.retrieve(_DEMO_ENTRIES[0][0])
    if found is not None:
        print(f"Retrieved value: {found}")
    return 0