"""Merkle Patricia trie with a pure-Python Keccak/SHA-3 implementation."""

__version__ = "0.1.0"
__all__ = ["keccak", "values", "nodes", "trie"]