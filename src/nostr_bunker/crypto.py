"""Nostr key handling, event signing and NIP-04/NIP-44 payload encryption."""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Mapping, Protocol, Union

from nostr_sdk import (
    Event,
    EventBuilder,
    Keys,
    Kind,
    Nip44Version,
    PublicKey,
    Tag,
    Timestamp,
    nip04_decrypt,
    nip04_encrypt,
    nip44_decrypt,
    nip44_encrypt,
)

from nostr_bunker.types import Identity, JsonDict

MaybeAwaitable = Union[Any, Awaitable[Any]]


class Signer(Protocol):
    """Cryptographic operations bound to one secret key.

    Implementations may return plain values or awaitables.
    """

    def sign_event(self, fields: Mapping[str, Any]) -> MaybeAwaitable: ...

    def nip04_encrypt(self, pubkey: str, plaintext: str) -> MaybeAwaitable: ...

    def nip04_decrypt(self, pubkey: str, ciphertext: str) -> MaybeAwaitable: ...

    def nip44_encrypt(self, pubkey: str, plaintext: str) -> MaybeAwaitable: ...

    def nip44_decrypt(self, pubkey: str, ciphertext: str) -> MaybeAwaitable: ...


SignerFactory = Callable[[Identity], Signer]


def generate_keys() -> tuple[str, str]:
    """Return a fresh ``(nsec, npub)`` pair."""
    keys = Keys.generate()
    return keys.secret_key().to_bech32(), keys.public_key().to_bech32()


def derive_public_key(nsec: str) -> tuple[str, str]:
    """Return ``(hex, npub)`` for the public key of ``nsec``."""
    public_key = Keys.parse(nsec).public_key()
    return public_key.to_hex(), public_key.to_bech32()


def verify_event(event: Mapping[str, Any]) -> bool:
    try:
        return bool(Event.from_json(json.dumps(dict(event))).verify())
    except Exception:
        return False


class NostrSigner:
    def __init__(self, nsec: str):
        self._keys = Keys.parse(nsec)

    @classmethod
    def from_identity(cls, identity: Identity) -> "NostrSigner":
        return cls(identity.nsec)

    @property
    def public_key(self) -> str:
        return self._keys.public_key().to_hex()

    def sign_event(self, fields: Mapping[str, Any]) -> JsonDict:
        builder = (
            EventBuilder(Kind(int(fields["kind"])), str(fields["content"]))
            .tags([Tag.parse([str(part) for part in tag]) for tag in fields["tags"]])
            .custom_created_at(Timestamp.from_secs(int(fields["created_at"])))
        )
        event = builder.sign_with_keys(self._keys)
        return JsonDict(json.loads(event.as_json()))

    def nip04_encrypt(self, pubkey: str, plaintext: str) -> str:
        return nip04_encrypt(self._keys.secret_key(), PublicKey.parse(pubkey), plaintext)

    def nip04_decrypt(self, pubkey: str, ciphertext: str) -> str:
        return nip04_decrypt(self._keys.secret_key(), PublicKey.parse(pubkey), ciphertext)

    def nip44_encrypt(self, pubkey: str, plaintext: str) -> str:
        return nip44_encrypt(
            self._keys.secret_key(),
            PublicKey.parse(pubkey),
            plaintext,
            Nip44Version.V2,
        )

    def nip44_decrypt(self, pubkey: str, ciphertext: str) -> str:
        return nip44_decrypt(self._keys.secret_key(), PublicKey.parse(pubkey), ciphertext)
