"""Value types that can be stored in the trie."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Int:
    """A plain integer value."""

    val: int = 0

    def __str__(self) -> str:
        return str(self.val)


@dataclass(frozen=True)
class Storage:
    """A storage entry holding either text or raw bytes.

    Text is rendered as is; bytes are rendered as lowercase hex.
    """

    value: Union[str, bytes] = ""

    def __post_init__(self) -> None:
        if isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, "value", bytes(self.value))
        elif not isinstance(self.value, (str, bytes)):
            raise TypeError(
                f"storage value must be str or bytes, got {type(self.value).__name__}"
            )

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return self.value
        return self.value.hex()