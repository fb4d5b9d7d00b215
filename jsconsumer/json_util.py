"""A module providing JSON helpers for the consumer API documents.

`JsonUtil` serializes with `orjson` when it is installed and with the standard
`json` module otherwise. The `read_*` functions pull a single typed value out
of an already parsed document by its tag.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Type, TypeVar

from jsconsumer.errors import DecodeError, EncodeError, InvalidPolicyError

try:
    import orjson
except ImportError:
    orjson = None

_NANOSECOND = 10**9
_INT64_MIN = -2**63
_UINT64_MAX = 2**64 - 1

_RFC3339_RE = re.compile(
    r'\A(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})\Z'
)

_P = TypeVar("_P")


class JsonUtil:
    """A utility class for handling JSON serialization operations.
    It uses the `orjson` library when available for its performance
    advantages, falling back to the standard `json` library when `orjson` is not
    installed.

    Methods:
        dumps(obj, *args, **kwargs) -> str: Converts object to JSON string
        dump_bytes(obj, *args, **kwargs) -> bytes: Converts object to JSON bytes
        loads(s, *args, **kwargs) -> Any: Parses JSON string into Python object
    """

    @staticmethod
    def _handle_sort_keys(kwargs):
        if kwargs.pop("sort_keys", False):
            option = kwargs.get("option", 0) | orjson.OPT_SORT_KEYS
            kwargs["option"] = option
        return kwargs

    @staticmethod
    def dumps(obj, *args, **kwargs) -> str:
        """Convert a Python object into a compact JSON string.
        """
        if orjson is None:
            kwargs.setdefault("separators", (",", ":"))
            return json.dumps(obj, *args, **kwargs)
        else:
            kwargs = JsonUtil._handle_sort_keys(kwargs)
            return orjson.dumps(obj, *args, **kwargs).decode("utf-8")

    @staticmethod
    def dump_bytes(obj, *args, **kwargs) -> bytes:
        """Convert a Python object into a compact JSON bytes string.
        """
        if orjson is None:
            kwargs.setdefault("separators", (",", ":"))
            return json.dumps(obj, *args, **kwargs).encode("utf-8")
        else:
            kwargs = JsonUtil._handle_sort_keys(kwargs)
            return orjson.dumps(obj, *args, **kwargs)

    @staticmethod
    def loads(s, *args, **kwargs) -> Any:
        """Parse a JSON string or bytes into a Python object.
        """
        if orjson is None:
            return json.loads(s, *args, **kwargs)
        else:
            return orjson.loads(s, *args, **kwargs)


def load_document(data) -> Dict[str, Any]:
    """Parse a JSON object, raising DecodeError for anything else.
    """
    try:
        doc = JsonUtil.loads(data)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"invalid JSON: {e}") from e
    if not isinstance(doc, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(doc).__name__}"
        )
    return doc


def read_string(doc: Dict[str, Any], tag: str,
                default: Optional[str] = None) -> Optional[str]:
    val = doc.get(tag)
    if val is None:
        return default
    if not isinstance(val, str):
        raise DecodeError("expected a string", field=tag, value=val)
    return val


def read_long(doc: Dict[str, Any], tag: str, default: int) -> int:
    val = doc.get(tag)
    if val is None:
        return default
    # bool is an int subclass but never a valid count.
    if isinstance(val, bool) or not isinstance(val, int):
        raise DecodeError("expected an integer", field=tag, value=val)
    return val


def read_duration(doc: Dict[str, Any], tag: str,
                  default: timedelta) -> timedelta:
    """Read a duration sent as integer nanoseconds.

    Precision below one microsecond is dropped.
    """
    nanos = read_long(doc, tag, None)
    if nanos is None:
        return default
    return timedelta(microseconds=nanos // 1000)


def read_date(doc: Dict[str, Any], tag: str,
              default: Optional[datetime] = None) -> Optional[datetime]:
    val = read_string(doc, tag)
    if val is None:
        return default
    try:
        return parse_rfc3339(val)
    except ValueError as e:
        raise DecodeError(str(e), field=tag, value=val) from e


def read_policy(doc: Dict[str, Any], tag: str, policy: Type[_P],
                default: _P) -> _P:
    val = read_string(doc, tag)
    if val is None:
        return default
    member = policy.from_wire(val)
    if member is None:
        raise InvalidPolicyError(
            f"unknown {policy.__name__}", field=tag, value=val
        )
    return member


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp as sent by the server.

    The server sends up to nanosecond precision, the fraction is cut down
    to microseconds.
    """
    m = _RFC3339_RE.match(value.upper())
    if m is None:
        raise ValueError(f"invalid RFC3339 timestamp: {value!r}")
    base, frac, offset = m.groups()
    if offset == "Z":
        offset = "+00:00"
    if frac:
        base = f"{base}.{frac[:6].ljust(6, '0')}"
    return datetime.fromisoformat(base + offset)


def to_rfc3339(value: datetime) -> str:
    """Render a datetime as RFC3339 in UTC, naive values are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        # Offsets with seconds have no RFC3339 form.
        value = value.astimezone(timezone.utc)
    result = value.isoformat()
    return result[:-len("+00:00")] + "Z"


def to_nanoseconds(value: timedelta) -> int:
    return (value.days * 86400 + value.seconds) * _NANOSECOND \
        + value.microseconds * 1000


def write_long(tag: str, value: int) -> int:
    """Check an integer fits the 64 bits the server reads it into.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodeError("expected an integer", field=tag, value=value)
    if not _INT64_MIN <= value <= _UINT64_MAX:
        raise EncodeError(
            "integer exceeds 64-bit range", field=tag, value=value
        )
    return value
