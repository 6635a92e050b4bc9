"""
Wire schema for the UI socket: one JSON object per newline-terminated line.
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from ask_human.errors import ProtocolError


def _load_object(line: str) -> Dict[str, Any]:
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Malformed JSON line: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ProtocolError(f"Missing field '{key}'")
    value = data[key]
    if not isinstance(value, kind):
        raise ProtocolError(f"Field '{key}' must be {kind.__name__}")
    return value


@dataclass(frozen=True)
class IpcRequest:
    """A question for the human, as sent by the backend."""

    id: str
    message: str
    predefined_options: Optional[List[str]] = None
    is_markdown: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False) + "\n"

    def to_pretty_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IpcRequest":
        options = data.get("predefined_options")
        if options is not None:
            if not isinstance(options, list) or not all(
                isinstance(o, str) for o in options
            ):
                raise ProtocolError(
                    "Field 'predefined_options' must be a list of strings or null"
                )
        return cls(
            id=_require(data, "id", str),
            message=_require(data, "message", str),
            predefined_options=options,
            is_markdown=_require(data, "is_markdown", bool),
        )

    @classmethod
    def from_line(cls, line: str) -> "IpcRequest":
        return cls.from_dict(_load_object(line.strip()))


@dataclass(frozen=True)
class IpcResponse:
    """The UI process's answer to exactly one IpcRequest."""

    id: str
    response: str
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls, request_id: str, response: str) -> "IpcResponse":
        return cls(id=request_id, response=response, success=True, error=None)

    @classmethod
    def failure(cls, request_id: str, error: str) -> "IpcResponse":
        return cls(id=request_id, response="", success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False) + "\n"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IpcResponse":
        error = data.get("error")
        if error is not None and not isinstance(error, str):
            raise ProtocolError("Field 'error' must be a string or null")
        return cls(
            id=_require(data, "id", str),
            response=_require(data, "response", str),
            success=_require(data, "success", bool),
            error=error,
        )

    @classmethod
    def from_line(cls, line: str) -> "IpcResponse":
        return cls.from_dict(_load_object(line.strip()))
