"""Signer-side request dispatch: identity load, origin check, crypto call."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping

from nostr_bunker.authorization import authorize
from nostr_bunker.config import DEFAULT_RELAYS
from nostr_bunker.crypto import NostrSigner, Signer, SignerFactory
from nostr_bunker.errors import (
    UNKNOWN_ERROR_MESSAGE,
    BunkerError,
    CryptoFailureError,
    InvalidParamsError,
    OriginRejectedError,
    UnsupportedMethodError,
)
from nostr_bunker.identity_store import IdentityStore
from nostr_bunker.types import (
    GET_PUBLIC_KEY,
    GET_RELAYS,
    NIP04_DECRYPT,
    NIP04_ENCRYPT,
    NIP44_DECRYPT,
    NIP44_ENCRYPT,
    SIGN_EVENT,
    Identity,
    RelayPolicy,
    Request,
    Response,
)

logger = logging.getLogger(__name__)

Handler = Callable[["Dispatcher", Identity, Mapping[str, Any]], Awaitable[Any]]


async def _call_signer(operation: Callable[[], Any]) -> Any:
    try:
        value = operation()
        if inspect.isawaitable(value):
            value = await value
    except Exception as error:
        raise CryptoFailureError(str(error) or UNKNOWN_ERROR_MESSAGE) from error
    return value


def _require_str(params: Mapping[str, Any], name: str) -> str:
    if name not in params:
        raise InvalidParamsError(f"Missing parameter: {name}")
    value = params[name]
    if not isinstance(value, str):
        raise InvalidParamsError(f"Invalid parameter: {name}")
    return value


def _require_int(params: Mapping[str, Any], name: str) -> int:
    if name not in params:
        raise InvalidParamsError(f"Missing parameter: {name}")
    value = params[name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParamsError(f"Invalid parameter: {name}")
    try:
        integer = int(value)
    except (OverflowError, ValueError):
        raise InvalidParamsError(f"Invalid parameter: {name}")
    if integer != value or integer < 0:
        raise InvalidParamsError(f"Invalid parameter: {name}")
    return integer


def _require_tags(params: Mapping[str, Any]) -> list[list[str]]:
    if "tags" not in params:
        raise InvalidParamsError("Missing parameter: tags")
    tags = params["tags"]
    if not isinstance(tags, list) or not all(
        isinstance(tag, list) and tag and all(isinstance(part, str) for part in tag) for tag in tags
    ):
        raise InvalidParamsError("Invalid parameter: tags")
    return [list(tag) for tag in tags]


class Dispatcher:
    """Turns one Request into one Response. Holds no state between calls."""

    def __init__(
        self,
        store: IdentityStore,
        *,
        signer_factory: SignerFactory = NostrSigner.from_identity,
        relays: Mapping[str, RelayPolicy] = DEFAULT_RELAYS,
    ):
        self._store = store
        self._signer_factory = signer_factory
        self._relays = dict(relays)

    async def dispatch(self, request: Request, origin: str) -> Response:
        try:
            identity = self._store.load()
            if not authorize(identity, origin):
                logger.warning("Rejected %s request from origin %s", request.type, origin)
                raise OriginRejectedError()

            handler = _HANDLERS.get(request.type)
            if handler is None:
                raise UnsupportedMethodError()

            result = await handler(self, identity, request.params)
            return Response(id=request.id, result=result)
        except BunkerError as error:
            return Response(id=request.id, error=str(error) or UNKNOWN_ERROR_MESSAGE)
        except Exception as error:  # noqa: BLE001
            logger.exception("Request %s (%s) failed", request.id, request.type)
            return Response(id=request.id, error=str(error) or UNKNOWN_ERROR_MESSAGE)

    def _signer(self, identity: Identity) -> Signer:
        return self._signer_factory(identity)

    async def _get_public_key(self, identity: Identity, params: Mapping[str, Any]) -> str:
        return identity.public_key

    async def _sign_event(self, identity: Identity, params: Mapping[str, Any]) -> Any:
        fields = {
            "created_at": _require_int(params, "created_at"),
            "kind": _require_int(params, "kind"),
            "tags": _require_tags(params),
            "content": _require_str(params, "content"),
        }
        return await _call_signer(lambda: self._signer(identity).sign_event(fields))

    async def _get_relays(self, identity: Identity, params: Mapping[str, Any]) -> dict[str, dict[str, bool]]:
        return {url: policy.to_dict() for url, policy in self._relays.items()}

    async def _nip04_encrypt(self, identity: Identity, params: Mapping[str, Any]) -> str:
        pubkey = _require_str(params, "pubkey")
        plaintext = _require_str(params, "plaintext")
        return await _call_signer(lambda: self._signer(identity).nip04_encrypt(pubkey, plaintext))

    async def _nip04_decrypt(self, identity: Identity, params: Mapping[str, Any]) -> str:
        pubkey = _require_str(params, "pubkey")
        ciphertext = _require_str(params, "ciphertext")
        return await _call_signer(lambda: self._signer(identity).nip04_decrypt(pubkey, ciphertext))

    async def _nip44_encrypt(self, identity: Identity, params: Mapping[str, Any]) -> str:
        pubkey = _require_str(params, "pubkey")
        plaintext = _require_str(params, "plaintext")
        return await _call_signer(lambda: self._signer(identity).nip44_encrypt(pubkey, plaintext))

    async def _nip44_decrypt(self, identity: Identity, params: Mapping[str, Any]) -> str:
        pubkey = _require_str(params, "pubkey")
        ciphertext = _require_str(params, "ciphertext")
        return await _call_signer(lambda: self._signer(identity).nip44_decrypt(pubkey, ciphertext))


_HANDLERS: dict[str, Handler] = {
    GET_PUBLIC_KEY: Dispatcher._get_public_key,
    SIGN_EVENT: Dispatcher._sign_event,
    GET_RELAYS: Dispatcher._get_relays,
    NIP04_ENCRYPT: Dispatcher._nip04_encrypt,
    NIP04_DECRYPT: Dispatcher._nip04_decrypt,
    NIP44_ENCRYPT: Dispatcher._nip44_encrypt,
    NIP44_DECRYPT: Dispatcher._nip44_decrypt,
}
