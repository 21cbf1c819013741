"""Client SDK: correlates requests to a signer window with their responses."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Mapping, Protocol

from nostr_bunker.authorization import normalize_origin
from nostr_bunker.channel import MessageChannel, MessageEvent, MessageSource
from nostr_bunker.config import parse_timeout, resolve_signer_url, resolve_timeout
from nostr_bunker.errors import NotConnectedError, RequestTimeoutError, SignerError
from nostr_bunker.types import (
    GET_PUBLIC_KEY,
    GET_RELAYS,
    NIP04_DECRYPT,
    NIP04_ENCRYPT,
    NIP44_DECRYPT,
    NIP44_ENCRYPT,
    SIGN_EVENT,
    RelayPolicy,
    Request,
    Response,
)

logger = logging.getLogger(__name__)

_DEFAULT = object()
_EVENT_FIELDS = ("created_at", "kind", "tags", "content")


class SignerWindow(MessageSource, Protocol):
    closed: bool


Opener = Callable[[str], SignerWindow]


class NostrClient:
    """Talks to a signer window opened at ``signer_url``.

    ``window`` is the client's own context, where responses arrive;
    ``opener`` opens the signer window and returns a handle to it.
    """

    def __init__(
        self,
        signer_url: str | None = None,
        *,
        window: MessageChannel,
        opener: Opener,
        timeout: Any = _DEFAULT,
    ):
        self.signer_url = resolve_signer_url(signer_url)
        self.signer_origin = normalize_origin(self.signer_url)
        self.timeout = resolve_timeout() if timeout is _DEFAULT else parse_timeout(timeout)
        self._window = window
        self._opener = opener
        self._signer_window: SignerWindow | None = None
        self._listening = False
        self._pending: dict[str, asyncio.Future] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def connected(self) -> bool:
        return self._signer_window is not None and not self._signer_window.closed

    async def connect(self) -> None:
        if self.connected:
            return
        self._signer_window = self._opener(self.signer_url)
        if not self._listening:
            self._window.on_message(self._on_message)
            self._listening = True
        logger.debug("Opened signer window at %s", self.signer_origin)

    def close(self) -> None:
        """Cancel every pending call."""
        pending = list(self._pending.values())
        self._pending.clear()
        for future in pending:
            if not future.done():
                future.cancel()

    def _on_message(self, event: MessageEvent) -> None:
        if event.origin != self.signer_origin:
            return
        response = Response.from_message(event.data)
        if response is None:
            return
        future = self._pending.pop(response.id, None)
        if future is None or future.done():
            return
        if response.error is not None:
            future.set_exception(SignerError(response.error))
        else:
            future.set_result(response.result)

    def _new_id(self) -> str:
        request_id = uuid.uuid4().hex
        while request_id in self._pending:
            request_id = uuid.uuid4().hex
        return request_id

    async def _send_request(
        self,
        request_type: str,
        params: Mapping[str, Any] | None = None,
        timeout: Any = _DEFAULT,
    ) -> Any:
        if self._signer_window is None:
            raise NotConnectedError("Call connect() before sending requests")

        deadline = self.timeout if timeout is _DEFAULT else parse_timeout(timeout)
        request = Request(id=self._new_id(), type=request_type, params=dict(params or {}))
        future = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future
        try:
            self._signer_window.post_message(request.to_message(), self.signer_url)
            if deadline is None:
                return await future
            return await asyncio.wait_for(future, deadline)
        except asyncio.TimeoutError:
            raise RequestTimeoutError(
                f"No response to {request_type} within {deadline:g} seconds",
            ) from None
        finally:
            self._pending.pop(request.id, None)

    async def get_public_key(self, *, timeout: Any = _DEFAULT) -> str:
        return await self._send_request(GET_PUBLIC_KEY, timeout=timeout)

    async def sign_event(self, event: Mapping[str, Any], *, timeout: Any = _DEFAULT) -> dict[str, Any]:
        params = {name: event[name] for name in _EVENT_FIELDS if name in event}
        if isinstance(params.get("tags"), (list, tuple)):
            params["tags"] = [list(tag) if isinstance(tag, tuple) else tag for tag in params["tags"]]
        return await self._send_request(SIGN_EVENT, params, timeout=timeout)

    async def get_relays(self, *, timeout: Any = _DEFAULT) -> dict[str, RelayPolicy]:
        raw = await self._send_request(GET_RELAYS, timeout=timeout)
        if not isinstance(raw, Mapping) or not all(
            isinstance(url, str) and isinstance(policy, Mapping) for url, policy in raw.items()
        ):
            raise SignerError("Invalid relay configuration")
        return {
            url: RelayPolicy(read=bool(policy.get("read")), write=bool(policy.get("write")))
            for url, policy in raw.items()
        }

    async def nip04_encrypt(self, pubkey: str, plaintext: str, *, timeout: Any = _DEFAULT) -> str:
        return await self._send_request(
            NIP04_ENCRYPT,
            {"pubkey": pubkey, "plaintext": plaintext},
            timeout=timeout,
        )

    async def nip04_decrypt(self, pubkey: str, ciphertext: str, *, timeout: Any = _DEFAULT) -> str:
        return await self._send_request(
            NIP04_DECRYPT,
            {"pubkey": pubkey, "ciphertext": ciphertext},
            timeout=timeout,
        )

    async def nip44_encrypt(self, pubkey: str, plaintext: str, *, timeout: Any = _DEFAULT) -> str:
        return await self._send_request(
            NIP44_ENCRYPT,
            {"pubkey": pubkey, "plaintext": plaintext},
            timeout=timeout,
        )

    async def nip44_decrypt(self, pubkey: str, ciphertext: str, *, timeout: Any = _DEFAULT) -> str:
        return await self._send_request(
            NIP44_DECRYPT,
            {"pubkey": pubkey, "ciphertext": ciphertext},
            timeout=timeout,
        )
