"""
SHA-256 helpers for the record hashes shown as "blockchain verified".
"""
import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


def _json_serializer(obj):
    if isinstance(obj, Decimal):
        # Normalized so 40.0000 and 40 hash the same
        normalized = obj.normalize()
        return format(normalized, "f")
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict) -> str:
    """Sorted keys, no whitespace, stable rendering of Decimal/datetime/UUID."""
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """Hex SHA-256 of the canonical JSON form of a payload."""
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_parts(*parts) -> str:
    """Hex SHA-256 of the parts joined with '|'."""
    data = "|".join(str(part) for part in parts)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def hash_user_record(username: str, first_name: str, last_name: str, email: str) -> str:
    """Record hash stored on users for tamper-evidence display."""
    return hashlib.sha256(
        f"{username}-{first_name}-{last_name}-{email}".encode("utf-8")
    ).hexdigest()
