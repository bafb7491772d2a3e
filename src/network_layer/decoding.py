"""
Key-path aware decoding of JSON response bodies.

Backend responses wrap payloads in envelopes ({"data": {...}}, {"user": {...}}).
The key path is resolved by navigating the parsed document before the
sub-document is validated into the requested type with pydantic.
"""

import json
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from network_layer.exceptions import DecodingError

T = TypeVar("T")

KEY_PATH_SEPARATOR = "."


@lru_cache(maxsize=256)
def _adapter_for(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def parse_json(content: bytes) -> Any:
    """Parse a response body, raising DecodingError for malformed JSON."""
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodingError(
            "Response body is not valid JSON",
            details={"parse_error": str(e), "content_snippet": content[:200].decode("utf-8", "replace")},
        )


def extract_key_path(document: Any, key_path: str, separator: str = KEY_PATH_SEPARATOR) -> Any:
    """
    Return the sub-document of `document` located at `key_path`.

    Each segment must name a key of a JSON object. A missing key, or a
    segment applied to a non-object, raises DecodingError.

    >>> extract_key_path({"data": {"items": [1, 2]}}, "data.items")
    [1, 2]
    """
    keys = [key for key in key_path.split(separator) if key]
    if not keys:
        raise DecodingError("Decoding key path is empty", key_path=key_path)
    return _navigate(document, keys, key_path)


def _navigate(document: Any, keys: list[str], key_path: str) -> Any:
    if not keys:
        return document

    key, remaining = keys[0], keys[1:]
    if not isinstance(document, dict):
        raise DecodingError(
            f"Expected an object at '{key}'",
            key_path=key_path,
            details={"found_type": type(document).__name__},
        )
    if key not in document:
        raise DecodingError(f"Key '{key}' not found", key_path=key_path)
    return _navigate(document[key], remaining, key_path)


def decode(type_: type[T], content: bytes, key_path: str | None = None) -> T:
    """
    Decode `content` into `type_`, optionally extracting `key_path` first.

    Raises:
        DecodingError: Malformed JSON, missing key path, or shape mismatch
    """
    adapter = _adapter_for(type_)
    try:
        if key_path is None:
            return adapter.validate_json(content)
        document = extract_key_path(parse_json(content), key_path)
        return adapter.validate_python(document)
    except PydanticValidationError as e:
        raise DecodingError(
            f"Response does not match {getattr(type_, '__name__', str(type_))}",
            key_path=key_path,
            details={"validation_errors": [err["msg"] for err in e.errors()]},
        )
