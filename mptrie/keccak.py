"""Keccak-f[1600] sponge with the FIPS 202 hash functions and Keccak-256."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview, str]

STATE_BYTES = 200
_LANES = 25
_ROUNDS = 24
_MASK64 = (1 << 64) - 1


def _rol(value: int, shift: int) -> int:
    shift %= 64
    if shift == 0:
        return value
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _round_constants() -> tuple[int, ...]:
    """Derive the iota constants from the x^8+x^6+x^5+x^4+1 LFSR."""
    constants = []
    register = 0x01
    for _ in range(_ROUNDS):
        constant = 0
        for j in range(7):
            register = ((register << 1) ^ (0x71 if register & 0x80 else 0)) & 0xFF
            if register & 0x02:
                constant |= 1 << ((1 << j) - 1)
        constants.append(constant)
    return tuple(constants)


def _rho_pi_steps() -> tuple[tuple[int, int], ...]:
    """Lane visiting order and rotation amounts of the combined rho and pi steps."""
    steps = []
    x, y, rotation = 1, 0, 0
    for j in range(24):
        rotation += j + 1
        x, y = y, (2 * x + 3 * y) % 5
        steps.append((x + 5 * y, rotation % 64))
    return tuple(steps)


_ROUND_CONSTANTS = _round_constants()
_RHO_PI_STEPS = _rho_pi_steps()


def _permute_lanes(lanes: list[int]) -> None:
    for constant in _ROUND_CONSTANTS:
        # theta
        columns = [
            lanes[x] ^ lanes[x + 5] ^ lanes[x + 10] ^ lanes[x + 15] ^ lanes[x + 20]
            for x in range(5)
        ]
        for x in range(5):
            d = columns[(x + 4) % 5] ^ _rol(columns[(x + 1) % 5], 1)
            for y in range(0, _LANES, 5):
                lanes[x + y] ^= d
        # rho and pi
        carried = lanes[1]
        for index, rotation in _RHO_PI_STEPS:
            lanes[index], carried = _rol(carried, rotation), lanes[index]
        # chi
        for y in range(0, _LANES, 5):
            row = lanes[y:y + 5]
            for x in range(5):
                lanes[x + y] = row[x] ^ (~row[(x + 1) % 5] & _MASK64 & row[(x + 2) % 5])
        # iota
        lanes[0] ^= constant


def _to_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected bytes-like or str, got {type(data).__name__}")


def _permute_state(state: bytearray) -> None:
    lanes = [
        int.from_bytes(state[8 * i:8 * i + 8], "little") for i in range(_LANES)
    ]
    _permute_lanes(lanes)
    state[:] = b"".join(lane.to_bytes(8, "little") for lane in lanes)


def keccak_f1600(state: bytes | bytearray | memoryview) -> bytes:
    """Apply the Keccak-f[1600] permutation to a 200-byte state and return the result."""
    buffer = bytearray(state)
    if len(buffer) != STATE_BYTES:
        raise ValueError(f"state must be {STATE_BYTES} bytes, got {len(buffer)}")
    _permute_state(buffer)
    return bytes(buffer)


def keccak(
    rate: int,
    capacity: int,
    data: BytesLike,
    suffix: int,
    output_length: int,
) -> bytes:
    """Run the Keccak sponge with the given rate and capacity in bits.

    ``suffix`` holds the domain-separation bits followed by the first padding bit.
    """
    if rate <= 0 or rate % 8 or rate + capacity != 1600 or capacity < 0:
        raise ValueError(f"invalid rate/capacity: {rate}/{capacity}")
    if not 0 <= suffix <= 0xFF:
        raise ValueError(f"suffix must fit in one byte, got {suffix}")
    if output_length < 0:
        raise ValueError(f"output length must not be negative, got {output_length}")

    message = _to_bytes(data)
    block = rate // 8
    state = bytearray(STATE_BYTES)

    filled = 0
    for start in range(0, len(message), block):
        chunk = message[start:start + block]
        for i, byte in enumerate(chunk):
            state[i] ^= byte
        if len(chunk) == block:
            _permute_state(state)
            filled = 0
        else:
            filled = len(chunk)

    state[filled] ^= suffix
    if suffix & 0x80 and filled == block - 1:
        _permute_state(state)
    state[block - 1] ^= 0x80
    _permute_state(state)

    output = bytearray()
    remaining = output_length
    while remaining > 0:
        take = min(remaining, block)
        output += state[:take]
        remaining -= take
        if remaining > 0:
            _permute_state(state)
    return bytes(output)


def shake128(data: BytesLike, output_length: int) -> bytes:
    """SHAKE128 extendable-output function."""
    return keccak(1344, 256, data, 0x1F, output_length)


def shake256(data: BytesLike, output_length: int) -> bytes:
    """SHAKE256 extendable-output function."""
    return keccak(1088, 512, data, 0x1F, output_length)


def sha3_224(data: BytesLike) -> bytes:
    """SHA3-224 digest."""
    return keccak(1152, 448, data, 0x06, 28)


def sha3_256(data: BytesLike) -> bytes:
    """SHA3-256 digest."""
    return keccak(1088, 512, data, 0x06, 32)


def sha3_384(data: BytesLike) -> bytes:
    """SHA3-384 digest."""
    return keccak(832, 768, data, 0x06, 48)


def sha3_512(data: BytesLike) -> bytes:
    """SHA3-512 digest."""
    return keccak(576, 1024, data, 0x06, 64)


def keccak256(data: BytesLike) -> bytes:
    """Original Keccak-256 digest, with the pre-standard 0x01 padding."""
    return keccak(1088, 512, data, 0x01, 32)