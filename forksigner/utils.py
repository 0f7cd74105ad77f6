# Copyright (C) 2018-2025 The fork-signer developers
#
# This file is part of fork-signer
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of fork-signer, including this file, may be copied, modified,
# propagated, or distributed except according to the terms contained in the
# LICENSE file.

import hashlib
import struct
from typing import Tuple

from base58check import b58encode, b58decode  # type: ignore

from forksigner.errors import SerializationError
from forksigner.ripemd160 import ripemd160


def prepend_compact_size(data: bytes) -> bytes:
    """
    Counts bytes and returns them with their varint (or compact size) prepended.
    """
    varint_bytes = encode_varint(len(data))
    return varint_bytes + data


def encode_varint(i: int) -> bytes:
    """
    Encode a potentially very large integer into varint bytes. The length should be
    specified in little-endian.

    https://bitcoin.org/en/developer-reference#compactsize-unsigned-integers
    """
    if i < 253:
        return bytes([i])
    elif i < 0x10000:
        return b"\xfd" + i.to_bytes(2, "little")
    elif i < 0x100000000:
        return b"\xfe" + i.to_bytes(4, "little")
    elif i < 0x10000000000000000:
        return b"\xff" + i.to_bytes(8, "little")
    else:
        raise ValueError("Integer is too large: %d" % i)


def parse_compact_size(data: bytes) -> Tuple[int, int]:
    """
    Parse variable integer. Returns (count, size)
    """
    if not data:
        raise SerializationError("Unexpected end of data while reading compact size")

    first_byte = data[0]
    if first_byte < 0xFD:
        return (first_byte, 1)

    fmt, size = {0xFD: ("<H", 3), 0xFE: ("<I", 5), 0xFF: ("<Q", 9)}[first_byte]
    if len(data) < size:
        raise SerializationError("Unexpected end of data while reading compact size")
    return (struct.unpack(fmt, data[1:size])[0], size)


def hash256(data: bytes) -> bytes:
    """SHA-256 applied twice, used for txids, sighashes and checksums"""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160( SHA-256( data ) ), used for public key and script hashes"""
    return ripemd160(hashlib.sha256(data).digest())


def b58check_encode(data: bytes) -> str:
    """
    |  Pseudocode:
    |      checksum = (first 4 bytes of SHA-256( SHA-256( data ) ))
    |      Base58Encode( data + checksum )
    """
    checksum = hash256(data)[:4]
    return b58encode(data + checksum).decode("utf-8")


def b58check_decode(encoded: str) -> bytes:
    """Base58 decodes and verifies the 4 byte checksum, returning the payload

    Raises
    ------
    ValueError
        if the string has non base58 characters or the checksum is wrong
    """
    try:
        data_checksum = b58decode(encoded.encode("utf-8"))
    except (ValueError, KeyError) as e:
        raise ValueError(f"Invalid base58 string: {encoded!r}") from e

    if len(data_checksum) < 5:
        raise ValueError("Base58 data too short")

    data, checksum = data_checksum[:-4], data_checksum[-4:]
    if hash256(data)[:4] != checksum:
        raise ValueError("Checksum is wrong. Possible mistype?")
    return data


#
# Basic conversions between bytes (b), hexadecimal (h) and integer (i)
#
def b_to_h(b: bytes) -> str:
    """Converts bytes to hexadecimal string"""
    return b.hex()


def h_to_b(h: str) -> bytes:
    """Converts hexadecimal string to bytes

    Raises SerializationError (a ValueError) on malformed hex.
    """
    try:
        return bytes.fromhex(h)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Invalid hex string: {h!r}") from e


def b_to_i(b: bytes) -> int:
    """Converts a bytes to a number"""
    return int.from_bytes(b, byteorder="big")


def i_to_b32(i: int) -> bytes:
    """Converts a integer to 32 bytes"""
    return i.to_bytes(32, byteorder="big")
