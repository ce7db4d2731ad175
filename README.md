# mptrie

A small Merkle Patricia trie backed by a content-addressed node store. Every
node is kept in an in-memory dictionary under the hex Keccak-256 digest of
its textual form. The package also provides a pure-Python Keccak-f[1600]
sponge, with the FIPS 202 functions built on top of it. It has no
dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Hashing

`mptrie.keccak` accepts `bytes`, `bytearray`, `memoryview` or `str` (encoded
as UTF-8) and returns `bytes`.

```python
from mptrie.keccak import keccak256, sha3_256, shake128

keccak256(b"Ethereum")      # 32-byte Keccak-256 digest (0x01 padding)
sha3_256(b"abc")            # 32-byte FIPS 202 SHA3-256 digest
shake128(b"abc", 64)        # 64 bytes of SHAKE128 output
```

`sha3_224`, `sha3_384`, `sha3_512` and `shake256` work the same way. The
underlying sponge is available as
`keccak(rate, capacity, data, suffix, output_length)`, with rate and capacity
in bits; it raises `ValueError` when they do not add up to 1600, when the
suffix does not fit in a byte, or when the output length is negative. The
permutation itself is `keccak_f1600(state)`, which takes a 200-byte state and
returns the permuted state.

## The trie

Keys are non-empty byte strings. The high nibble of the first byte gives the
key's parity: when it is even, the key's nibbles start at the second byte;
when it is odd, the low nibble of the first byte is the key's first nibble.

Values can be any object; its `str()` is what goes into a node's text and
hash. `mptrie.values` provides two value types: `Int`, rendered as its number,
and `Storage`, holding text (rendered as is) or bytes (rendered as lowercase
hex).

```python
from mptrie.trie import Trie
from mptrie.values import Int

trie = Trie()
trie.insert(bytes([0x12, 0x01, 0x34, 0x25]), Int(1))
trie.insert(bytes([0x12, 0x01]), Int(2))
trie.insert(bytes([0x12, 0x01, 0x67]), Int(3))

value = trie.retrieve(bytes([0x12, 0x01, 0x34, 0x25]))

for line in trie.db_lines():
    print(line)
```

`insert(key, value)` returns the new root, which is also kept in
`trie.root`; inserting an empty key raises `ValueError`.
`retrieve(key)` returns the stored value, or `None` when nothing is found.
`db_lines()` renders each stored node as `hash => node`, and `print_db()`
writes those same lines to standard output.

The node classes `Node`, `Leaf`, `Extension` and `Branch`, and the `NodeType`
enum, live in `mptrie.nodes`, together with the helpers `to_hex_string`,
`pack_nibbles`, `kth_nibble`, `find_common_prefix`, `suffix_nibbles` and
`path_offset`.

## Demo

```
mptrie-demo
```

This inserts three keys, prints the root node and the node store, and prints
the value read back for the first key. The same runs from Python as
`mptrie.trie.main()`.

## Limits

The node store lives only in memory: nothing is written to disk, and a trie
cannot be saved or loaded. Keys cannot be deleted once inserted. Node hashes
are taken over each node's text form, not over an RLP encoding, so root
hashes do not match those of other Merkle Patricia trie implementations.