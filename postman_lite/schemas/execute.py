"""
Pydantic schemas for request execution.

Defines the request descriptor accepted by the executor and the two
normalized outcome shapes it produces.
"""

from types import MappingProxyType
from typing import Any, Literal, Mapping, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from ..config import settings


# HTTP methods supported by the system
HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

# Methods that conventionally carry a request body
BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Transport failure taxonomy
ErrorCode = Literal[
    "CONNECTION_REFUSED",
    "TIMEOUT",
    "HOST_NOT_FOUND",
    "VALIDATION_FAILED",
    "UNKNOWN",
]


def freeze(value: Any) -> Any:
    """Read-only copy of a JSON-like value: mappings become proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Plain dict/list copy of a value produced by ``freeze``, ready for JSON encoding."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


class RequestDescriptor(BaseModel):
    """
    Immutable description of one HTTP call to make.

    Validation happens at construction: an unknown method, a URL that is not
    absolute http(s), or an out-of-range timeout raises
    ``pydantic.ValidationError`` before any network activity.
    """
    method: HttpMethod
    url: str
    headers: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    body: Any | None = None
    timeout_ms: int = Field(
        default_factory=lambda: settings.default_timeout_ms,
        alias="timeout",
        gt=0,
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        value = value.strip()
        try:
            parsed = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"Invalid URL format: {exc}") from exc
        if parsed.scheme not in ("http", "https"):
            raise ValueError("URL scheme must be http or https")
        if not parsed.host:
            raise ValueError("URL must include a host")
        return value

    @field_validator("headers", mode="before")
    @classmethod
    def collapse_header_case(cls, value: Any) -> Any:
        """Case-insensitive duplicate header names resolve to the last one given."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        collapsed: dict[Any, Any] = {}
        for name, header_value in value.items():
            for existing in [k for k in collapsed if str(k).lower() == str(name).lower()]:
                del collapsed[existing]
            collapsed[name] = header_value
        return collapsed

    @field_validator("headers")
    @classmethod
    def freeze_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_validator("body")
    @classmethod
    def freeze_body(cls, value: Any) -> Any:
        return freeze(value)

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def default_missing_timeout(cls, value: Any) -> Any:
        if value is None:
            return settings.default_timeout_ms
        return value

    @field_validator("timeout_ms")
    @classmethod
    def check_timeout_bound(cls, value: int) -> int:
        if value > settings.max_timeout_ms:
            raise ValueError(f"timeout must not exceed {settings.max_timeout_ms} ms")
        return value

    @field_serializer("headers", "body")
    def serialize_frozen(self, value: Any) -> Any:
        return thaw(value)

    @property
    def carries_body(self) -> bool:
        return self.method in BODY_METHODS

    def to_payload(self) -> dict[str, Any]:
        """Wire form accepted by the proxy endpoint."""
        payload = self.model_dump(by_alias=True)
        if self.body is None:
            payload.pop("body")
        return payload


class ExecutionResponse(BaseModel):
    """
    Upstream responded, whatever its status code.

    ``data`` is the decoded JSON value for JSON content types and the raw
    text otherwise.
    """
    status: int
    status_text: str
    headers: dict[str, str]
    data: Any = None
    response_time_ms: int
    response_size: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExecutionError(BaseModel):
    """The exchange could not be completed; no status was obtained."""
    error: str
    message: str
    code: ErrorCode

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


ExecutionResult = Union[ExecutionResponse, ExecutionError]


class RequestEcho(BaseModel):
    """What the proxy actually sent, echoed back for the caller."""
    url: str
    method: str
    timeout: int


class ProxyResponse(ExecutionResponse):
    """Proxy endpoint success body: the normalized response plus the request echo."""
    config: RequestEcho
