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

import copy
import struct
from typing import Any, Union

from forksigner.errors import SerializationError
from forksigner.utils import b_to_h, h_to_b


# The op codes that show up in the scripts of the supported address types
# and their spends. Complete list at: https://en.bitcoin.it/wiki/Script
OP_CODES = {
    # constants
    "OP_0": b"\x00",
    "OP_PUSHDATA1": b"\x4c",
    "OP_PUSHDATA2": b"\x4d",
    "OP_PUSHDATA4": b"\x4e",
    "OP_1NEGATE": b"\x4f",
    "OP_1": b"\x51",
    "OP_2": b"\x52",
    "OP_3": b"\x53",
    "OP_4": b"\x54",
    "OP_5": b"\x55",
    "OP_6": b"\x56",
    "OP_7": b"\x57",
    "OP_8": b"\x58",
    "OP_9": b"\x59",
    "OP_10": b"\x5a",
    "OP_11": b"\x5b",
    "OP_12": b"\x5c",
    "OP_13": b"\x5d",
    "OP_14": b"\x5e",
    "OP_15": b"\x5f",
    "OP_16": b"\x60",
    # flow control
    "OP_NOP": b"\x61",
    "OP_IF": b"\x63",
    "OP_NOTIF": b"\x64",
    "OP_ELSE": b"\x67",
    "OP_ENDIF": b"\x68",
    "OP_VERIFY": b"\x69",
    "OP_RETURN": b"\x6a",
    # stack
    "OP_DROP": b"\x75",
    "OP_DUP": b"\x76",
    "OP_SWAP": b"\x7c",
    # bitwise logic
    "OP_EQUAL": b"\x87",
    "OP_EQUALVERIFY": b"\x88",
    # crypto
    "OP_RIPEMD160": b"\xa6",
    "OP_SHA256": b"\xa8",
    "OP_HASH160": b"\xa9",
    "OP_HASH256": b"\xaa",
    "OP_CODESEPARATOR": b"\xab",
    "OP_CHECKSIG": b"\xac",
    "OP_CHECKSIGVERIFY": b"\xad",
    "OP_CHECKMULTISIG": b"\xae",
    "OP_CHECKMULTISIGVERIFY": b"\xaf",
    # locktime
    "OP_CHECKLOCKTIMEVERIFY": b"\xb1",
    "OP_CHECKSEQUENCEVERIFY": b"\xb2",
}

CODE_OPS = {code: name for name, code in OP_CODES.items()}

# data pushes with an explicit length field of 1, 2 or 4 bytes
_PUSHDATA_SIZES = {0x4C: 1, 0x4D: 2, 0x4E: 4}


class Script:
    """Represents any script in a Bitcoin fork

    A Script contains just a list of OP_CODES and hex data items and also
    knows how to serialize into bytes

    Attributes
    ----------
    script : list
        the list with all the script OP_CODES and data

    Methods
    -------
    to_bytes()
        returns a serialized byte version of the script
    to_hex()
        returns a serialized version of the script in hex
    get_script()
        returns the list of strings that makes up this script
    copy()
        creates a copy of the object (classmethod)
    from_raw()
        parses a serialized script (staticmethod)

    Raises
    ------
    ValueError
        If string data is too large or integer is negative
    """

    def __init__(self, script: list[Any]):
        """See Script description"""
        self.script: list[Any] = script

    @classmethod
    def copy(cls, script: "Script") -> "Script":
        """Deep copy of Script"""
        return cls(copy.deepcopy(script.script))

    def _op_push_data(self, data: str) -> bytes:
        """Converts data to appropriate OP_PUSHDATA OP code including length"""
        data_bytes = h_to_b(data)

        if len(data_bytes) < 0x4C:
            return bytes([len(data_bytes)]) + data_bytes
        elif len(data_bytes) <= 0xFF:
            return b"\x4c" + bytes([len(data_bytes)]) + data_bytes
        elif len(data_bytes) <= 0xFFFF:
            return b"\x4d" + struct.pack("<H", len(data_bytes)) + data_bytes
        elif len(data_bytes) <= 0xFFFFFFFF:
            return b"\x4e" + struct.pack("<I", len(data_bytes)) + data_bytes
        else:
            raise ValueError("Data too large. Cannot push into script")

    def _push_integer(self, integer: int) -> bytes:
        """Converts integer to bytes; as signed little-endian integer"""
        if integer < 0:
            raise ValueError("Integer is currently required to be positive.")

        number_of_bytes = (integer.bit_length() + 7) // 8
        integer_bytes = integer.to_bytes(number_of_bytes, byteorder="little")

        # keep it positive if the most significant bit is set
        if integer & (1 << number_of_bytes * 8 - 1):
            integer_bytes += b"\x00"

        return self._op_push_data(b_to_h(integer_bytes))

    def to_bytes(self) -> bytes:
        """Converts the script to bytes"""
        script_bytes = b""
        for token in self.script:
            if isinstance(token, str) and token in OP_CODES:
                script_bytes += OP_CODES[token]
            elif isinstance(token, int) and 0 <= token <= 16:
                script_bytes += OP_CODES["OP_" + str(token)]
            elif isinstance(token, int):
                script_bytes += self._push_integer(token)
            else:
                script_bytes += self._op_push_data(token)
        return script_bytes

    def to_hex(self) -> str:
        """Converts the script to hexadecimal"""
        return b_to_h(self.to_bytes())

    @staticmethod
    def from_raw(scriptrawhex: Union[str, bytes]) -> "Script":
        """
        Imports a Script commands list from raw hexadecimal data

        Raises
        ------
        SerializationError
            if a push runs past the end of the data or an op code is unknown
        """
        if isinstance(scriptrawhex, str):
            scriptraw = h_to_b(scriptrawhex)
        elif isinstance(scriptrawhex, bytes):
            scriptraw = scriptrawhex
        else:
            raise TypeError("Input must be a hexadecimal string or bytes")

        commands: list[Any] = []
        index = 0
        while index < len(scriptraw):
            byte = scriptraw[index]
            index += 1

            if 0x01 <= byte <= 0x4B:
                data_size = byte
            elif byte in _PUSHDATA_SIZES:
                width = _PUSHDATA_SIZES[byte]
                if index + width > len(scriptraw):
                    raise SerializationError("Truncated OP_PUSHDATA length")
                data_size = int.from_bytes(scriptraw[index : index + width], "little")
                index += width
            elif bytes([byte]) in CODE_OPS:
                commands.append(CODE_OPS[bytes([byte])])
                continue
            else:
                raise SerializationError(f"Unsupported op code 0x{byte:02x}")

            if index + data_size > len(scriptraw):
                raise SerializationError("Script push exceeds script length")
            commands.append(b_to_h(scriptraw[index : index + data_size]))
            index += data_size

        return Script(script=commands)

    def get_script(self) -> list[Any]:
        """Returns script as array of strings"""
        return self.script

    def __str__(self) -> str:
        return str(self.script)

    def __repr__(self) -> str:
        return self.__str__()

    def __eq__(self, _other: object) -> bool:
        if not isinstance(_other, Script):
            return False
        return self.to_bytes() == _other.to_bytes()
