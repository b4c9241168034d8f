"""
EIP-712 Typed Data Hashing

Computes the digest a wallet signs for ``eth_signTypedData`` requests. Two
encoding variants are supported:

- v4: arrays and recursive structs are encoded, missing nested structs hash to
  zero, missing atomic values are an error.
- v3 (legacy): fields with no value are skipped and arrays are rejected.

Reference: https://eips.ethereum.org/EIPS/eip-712
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from Crypto.Hash import keccak

DOMAIN_TYPE = "EIP712Domain"
_TYPE_NAME = re.compile(r"^\w*")


def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


@dataclass
class TypedDataField:
    """EIP-712 type field definition"""
    name: str
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TypedDataField":
        return cls(name=str(raw["name"]), type=str(raw["type"]))


Types = Dict[str, List[TypedDataField]]


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text[2:] or "0", 16)
        if text.lower().startswith("-0x"):
            return -int(text[3:] or "0", 16)
        return int(text)
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    raise ValueError(f"Cannot convert {type(value).__name__} to integer")


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value.startswith("0x"):
            body = value[2:]
            if len(body) % 2:
                body = "0" + body
            return bytes.fromhex(body)
        return value.encode("utf-8")
    if isinstance(value, int):
        return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    if isinstance(value, list):
        return bytes(value)
    raise ValueError(f"Cannot convert {type(value).__name__} to bytes")


class TypedDataEncoder:
    """EIP-712 struct encoding and hashing"""

    @staticmethod
    def parse_types(raw_types: Dict[str, Any]) -> Types:
        """Turn JSON type definitions into TypedDataField lists."""
        types: Types = {}
        for name, fields in (raw_types or {}).items():
            types[name] = [
                f if isinstance(f, TypedDataField) else TypedDataField.from_dict(f)
                for f in (fields or [])
            ]
        return types

    @staticmethod
    def sanitize(typed_data: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
        """Keep only the EIP-712 members and make sure EIP712Domain is defined."""
        if isinstance(typed_data, str):
            typed_data = json.loads(typed_data)
        if not isinstance(typed_data, dict):
            raise ValueError("typed data must be a JSON object")
        types = TypedDataEncoder.parse_types(typed_data.get("types") or {})
        types.setdefault(DOMAIN_TYPE, [])
        return {
            "types": types,
            "primaryType": typed_data.get("primaryType"),
            "domain": typed_data.get("domain") or {},
            "message": typed_data.get("message") or {},
        }

    @staticmethod
    def find_dependencies(primary_type: str, types: Types, results: List[str] | None = None) -> List[str]:
        """Collect primary_type and every struct type it references."""
        if results is None:
            results = []
        primary_type = _TYPE_NAME.match(primary_type).group(0)
        if primary_type in results or primary_type not in types:
            return results
        results.append(primary_type)
        for field in types[primary_type]:
            for dep in TypedDataEncoder.find_dependencies(field.type, types, results):
                if dep not in results:
                    results.append(dep)
        return results

    @staticmethod
    def encode_type(primary_type: str, types: Types) -> str:
        """
        Encode type string for hashing.
        Format: Primary(type name,...)Dep1(...)Dep2(...) with deps sorted.
        """
        deps = [d for d in TypedDataEncoder.find_dependencies(primary_type, types) if d != primary_type]
        result = []
        for type_name in [primary_type] + sorted(deps):
            if type_name not in types:
                raise ValueError(f"No type definition specified: {type_name}")
            field_strs = [f"{f.type} {f.name}" for f in types[type_name]]
            result.append(f"{type_name}({','.join(field_strs)})")
        return "".join(result)

    @staticmethod
    def type_hash(primary_type: str, types: Types) -> bytes:
        return keccak256(TypedDataEncoder.encode_type(primary_type, types).encode("utf-8"))

    @staticmethod
    def encode_atomic(field_type: str, value: Any) -> bytes:
        """ABI-encode a single static value into one 32-byte word."""
        if field_type == "address":
            return _to_int(value).to_bytes(32, "big")

        if field_type == "bool":
            return (1 if value else 0).to_bytes(32, "big")

        if field_type.startswith("uint"):
            number = _to_int(value)
            if number < 0:
                raise ValueError(f"Negative value for {field_type}")
            return number.to_bytes(32, "big")

        if field_type.startswith("int"):
            number = _to_int(value)
            if number < 0:
                number += 1 << 256
            return number.to_bytes(32, "big")

        if field_type.startswith("bytes") and len(field_type) > 5:
            length = int(field_type[5:])
            data = _to_bytes(value)
            if len(data) > length:
                raise ValueError(f"Value too long for {field_type}")
            return data.ljust(32, b"\x00")

        raise ValueError(f"Unsupported field type: {field_type}")

    @staticmethod
    def _encode_field_v4(name: str, field_type: str, value: Any, types: Types) -> bytes:
        if field_type in types:
            if value is None:
                return b"\x00" * 32
            return keccak256(TypedDataEncoder.encode_data(field_type, value, types, use_v4=True))

        if value is None:
            raise ValueError(f"missing value for field {name} of type {field_type}")

        if field_type == "bytes":
            return keccak256(_to_bytes(value))

        if field_type == "string":
            if isinstance(value, str):
                value = value.encode("utf-8")
            return keccak256(_to_bytes(value))

        if field_type.endswith("]"):
            item_type = field_type[: field_type.rindex("[")]
            encoded_items = [
                TypedDataEncoder._encode_field_v4(name, item_type, item, types)
                for item in value
            ]
            return keccak256(b"".join(encoded_items))

        return TypedDataEncoder.encode_atomic(field_type, value)

    @staticmethod
    def encode_data(
        primary_type: str,
        data: Dict[str, Any],
        types: Types,
        use_v4: bool = True,
    ) -> bytes:
        """Encode struct data for hashing"""
        if primary_type not in types:
            raise ValueError(f"Type {primary_type} not found in types")

        encoded: List[bytes] = [TypedDataEncoder.type_hash(primary_type, types)]
        for field in types[primary_type]:
            value = data.get(field.name)
            if use_v4:
                encoded.append(TypedDataEncoder._encode_field_v4(field.name, field.type, value, types))
                continue
            if value is None:
                continue
            if field.type == "bytes":
                encoded.append(keccak256(_to_bytes(value)))
            elif field.type == "string":
                if isinstance(value, str):
                    value = value.encode("utf-8")
                encoded.append(keccak256(_to_bytes(value)))
            elif field.type in types:
                encoded.append(keccak256(TypedDataEncoder.encode_data(field.type, value, types, use_v4=False)))
            elif field.type.endswith("]"):
                raise ValueError("Arrays currently unimplemented in encodeData")
            else:
                encoded.append(TypedDataEncoder.encode_atomic(field.type, value))
        return b"".join(encoded)

    @staticmethod
    def hash_struct(primary_type: str, data: Dict[str, Any], types: Types, use_v4: bool = True) -> bytes:
        return keccak256(TypedDataEncoder.encode_data(primary_type, data, types, use_v4))

    @staticmethod
    def hash_typed_data(typed_data: Union[str, Dict[str, Any]], use_v4: bool = True) -> bytes:
        """
        Digest to be signed for a full typed-data payload.

        keccak256("\\x19\\x01" || hashStruct(domain) || hashStruct(message)),
        with the message part omitted when primaryType is EIP712Domain.
        """
        sanitized = TypedDataEncoder.sanitize(typed_data)
        types = sanitized["types"]
        parts = [b"\x19\x01", TypedDataEncoder.hash_struct(DOMAIN_TYPE, sanitized["domain"], types, use_v4)]
        primary_type = sanitized["primaryType"]
        if primary_type != DOMAIN_TYPE:
            if not isinstance(primary_type, str) or not primary_type:
                raise ValueError("typed data is missing primaryType")
            parts.append(TypedDataEncoder.hash_struct(primary_type, sanitized["message"], types, use_v4))
        return keccak256(b"".join(parts))
