"""Shared datatypes for the nostr-bunker signer protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from nostr_bunker.errors import MalformedRequestError

GET_PUBLIC_KEY = "getPublicKey"
SIGN_EVENT = "signEvent"
GET_RELAYS = "getRelays"
NIP04_ENCRYPT = "nip04.encrypt"
NIP04_DECRYPT = "nip04.decrypt"
NIP44_ENCRYPT = "nip44.encrypt"
NIP44_DECRYPT = "nip44.decrypt"

REQUEST_TYPES = frozenset(
    [
        GET_PUBLIC_KEY,
        SIGN_EVENT,
        GET_RELAYS,
        NIP04_ENCRYPT,
        NIP04_DECRYPT,
        NIP44_ENCRYPT,
        NIP44_DECRYPT,
    ]
)


class JsonDict(dict[str, Any]):
    """Typed alias for JSON dictionaries used in internal serialization."""


@dataclass(frozen=True)
class Identity:
    nsec: str = field(repr=False)
    npub: str
    public_key: str
    allowed_origins: frozenset[str] = frozenset()

    def to_record(self) -> JsonDict:
        return JsonDict({
            "nsec": self.nsec,
            "npub": self.npub,
            "allowedOrigins": sorted(self.allowed_origins),
        })


@dataclass(frozen=True)
class ProvisionResult:
    nsec: str = field(repr=False)
    npub: str


@dataclass(frozen=True)
class RelayPolicy:
    read: bool
    write: bool

    def to_dict(self) -> dict[str, bool]:
        return {"read": self.read, "write": self.write}


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


@dataclass(frozen=True)
class Request:
    id: str
    type: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_message(cls, data: Any) -> "Request":
        """Shape an inbound payload into a Request.

        Raises MalformedRequestError when the payload has no usable id or type.
        """
        if not isinstance(data, Mapping):
            raise MalformedRequestError("Message is not an object")
        if not _non_empty_str(data.get("id")) or not _non_empty_str(data.get("type")):
            raise MalformedRequestError("Message is missing id or type")
        params = data.get("params")
        return cls(
            id=data["id"],
            type=data["type"],
            params=dict(params) if isinstance(params, Mapping) else {},
        )

    def to_message(self) -> JsonDict:
        message = JsonDict({"id": self.id, "type": self.type})
        if self.params:
            message["params"] = dict(self.params)
        return message


@dataclass(frozen=True)
class Response:
    id: str
    result: Any = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("Response must carry exactly one of result or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_message(cls, data: Any) -> Optional["Response"]:
        if not isinstance(data, Mapping) or not _non_empty_str(data.get("id")):
            return None
        error = data.get("error")
        result = data.get("result")
        if error is not None:
            return cls(id=data["id"], error=str(error))
        if result is not None:
            return cls(id=data["id"], result=result)
        return None

    def to_message(self) -> JsonDict:
        if self.error is not None:
            return JsonDict({"id": self.id, "error": self.error})
        return JsonDict({"id": self.id, "result": self.result})
