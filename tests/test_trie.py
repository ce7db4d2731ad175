import pytest

from mptrie.nodes import Branch, Extension, Leaf
from mptrie.trie import Trie, main
from mptrie.values import Int, Storage

KEY_A = bytes([0x12, 0x01, 0x34, 0x25])
KEY_B = bytes([0x12, 0x01])
KEY_C = bytes([0x12, 0x01, 0x67])
KEY_E = bytes([0x12, 0x01, 0x35, 0x67])


def _hashes(trie):
    return [line.split(" => ", 1)[0] for line in trie.db_lines()]


@pytest.fixture
def demo_trie():
    trie = Trie()
    trie.insert(KEY_A, Int(1))
    trie.insert(KEY_B, Int(2))
    trie.insert(KEY_C, Int(3))
    return trie


def test_retrieve_from_empty_trie():
    assert Trie().retrieve(KEY_A) is None


def test_single_insert_makes_leaf_root():
    trie = Trie()
    root = trie.insert(KEY_A, Int(1))
    assert isinstance(root, Leaf)
    assert root.path == bytes([0x32, 0x01, 0x34, 0x25])
    assert trie.retrieve(KEY_A) == Int(1)


def test_single_insert_db_holds_root():
    trie = Trie()
    trie.insert(KEY_A, Int(1))
    assert trie.db_lines() == [f"{trie.root.hash_node()} => {trie.root}"]


@pytest.mark.parametrize("key, expected", [(KEY_A, 1), (KEY_B, 2), (KEY_C, 3)])
def test_demo_keys_retrievable(demo_trie, key, expected):
    assert demo_trie.retrieve(key) == Int(expected)


@pytest.mark.parametrize(
    "key", [bytes([0x12, 0x01, 0x35]), bytes([0x12, 0x02]), bytes([0x12, 0x01, 0x68])]
)
def test_unknown_keys_return_none(demo_trie, key):
    assert demo_trie.retrieve(key) is None


def test_demo_root_is_extension_pointing_to_branch(demo_trie):
    root = demo_trie.root
    assert isinstance(root, Extension)
    assert root.path == KEY_B
    assert root.hash in _hashes(demo_trie)
    assert str(root).startswith("[ path: 12 01 hash: ")


def test_demo_db_keys_match_node_hashes(demo_trie):
    hashes = _hashes(demo_trie)
    assert demo_trie.root.hash_node() in hashes
    assert len(hashes) == len(set(hashes))
    leaf_or_ext_lines = [
        line for line in demo_trie.db_lines() if " => [ path: " in line
    ]
    assert leaf_or_ext_lines
    for line in demo_trie.db_lines():
        node_hash, rendered = line.split(" => ", 1)
        assert len(node_hash) == 64
        assert rendered != "null"


def test_update_leaf_value():
    trie = Trie()
    trie.insert(KEY_A, Int(1))
    trie.insert(KEY_A, Int(5))
    assert isinstance(trie.root, Leaf)
    assert trie.retrieve(KEY_A) == Int(5)
    assert len(trie.db_lines()) == 1


def test_update_branch_value(demo_trie):
    demo_trie.insert(KEY_B, Int(9))
    assert demo_trie.retrieve(KEY_B) == Int(9)
    assert demo_trie.retrieve(KEY_A) == Int(1)
    assert demo_trie.retrieve(KEY_C) == Int(3)


def test_partial_match_splits_into_branch():
    trie = Trie()
    trie.insert(KEY_A, Int(1))
    root = trie.insert(KEY_E, Int(7))
    assert isinstance(root, Extension)
    assert trie.retrieve(KEY_A) == Int(1)
    assert trie.retrieve(KEY_E) == Int(7)
    branch_lines = [line for line in trie.db_lines() if " => [ path: " not in line]
    assert len(branch_lines) == 1


def test_even_length_key():
    trie = Trie()
    key = bytes([0x00, 0x12, 0x34])
    trie.insert(key, Storage(b"\xab"))
    assert trie.retrieve(key) == Storage(b"\xab")
    assert str(trie.retrieve(key)) == "ab"


def test_insert_leaves_caller_key_untouched():
    key = bytearray(KEY_A)
    trie = Trie()
    trie.insert(key, Int(1))
    assert bytes(key) == KEY_A
    assert trie.retrieve(key) == Int(1)


def test_empty_key_rejected():
    with pytest.raises(ValueError):
        Trie().insert(b"", Int(1))


def test_empty_key_retrieves_none(demo_trie):
    assert demo_trie.retrieve(b"") is None


def test_branch_node_in_db(demo_trie):
    branch_hash = demo_trie.root.hash
    lines = dict(line.split(" => ", 1) for line in demo_trie.db_lines())
    assert branch_hash in lines
    assert lines[branch_hash].startswith("[ ")
    assert isinstance(Branch(), Branch)


def test_print_db_matches_db_lines(demo_trie, capsys):
    demo_trie.print_db()
    out = capsys.readouterr().out
    assert out.splitlines() == demo_trie.db_lines()


def test_main_output(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0].startswith("Root: [ path: 12 01 hash: ")
    assert lines[-1] == "Retrieved value: 1"
    assert len(lines) == 1 + 4 + 1