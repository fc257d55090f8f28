"""Fast JSON decoding and encoding for app payloads."""

from typing import Any
import json

import msgspec
import orjson


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


_decoder = msgspec.json.Decoder()


def decode_json(data: str | bytes) -> Any:
    """
    Decode a JSON document.

    Args:
        data: JSON text or UTF-8 bytes

    Returns:
        Decoded Python object

    Raises:
        JSONParseError: If the document is not valid JSON
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e) from e


def decode_json_object(data: str | bytes) -> dict[str, Any]:
    """Decode a JSON document that must be an object."""
    result = decode_json(data)
    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result


def _default(obj: Any) -> Any:
    # Implementations and live instances are not serializable; show their repr
    return repr(obj)


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, etc.)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 0:
        try:
            return orjson.dumps(obj, default=_default).decode("utf-8")
        except (TypeError, ValueError):
            # Integers outside 64-bit range, non-str dict keys
            pass

    if indent == 2:
        try:
            return orjson.dumps(obj, default=_default, option=orjson.OPT_INDENT_2).decode("utf-8")
        except (TypeError, ValueError):
            pass

    return json.dumps(obj, indent=indent if indent > 0 else None, default=_default)


__all__ = ["JSONParseError", "decode_json", "decode_json_object", "safe_json_dumps"]
