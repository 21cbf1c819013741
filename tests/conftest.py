from __future__ import annotations

import asyncio
from typing import Any, Mapping

import pytest

from nostr_bunker.identity_store import IdentityStore
from nostr_bunker.storage import MemoryBlobStore
from nostr_bunker.types import Identity

APP_ORIGIN = "https://app.example"
EVIL_ORIGIN = "https://evil.example"


class FakeSigner:
    """Deterministic stand-in for the crypto capability."""

    def __init__(self, identity: Identity, *, delay: float = 0.0, fail_with: Exception | None = None):
        self.identity = identity
        self.delay = delay
        self.fail_with = fail_with
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def _maybe_wait(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with

    async def sign_event(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("sign_event", (dict(fields),)))
        await self._maybe_wait()
        return {
            **fields,
            "id": "f" * 64,
            "pubkey": self.identity.public_key,
            "sig": "e" * 128,
        }

    def nip04_encrypt(self, pubkey: str, plaintext: str) -> str:
        self.calls.append(("nip04_encrypt", (pubkey, plaintext)))
        if self.fail_with is not None:
            raise self.fail_with
        return f"nip04:{pubkey}:{plaintext[::-1]}"

    def nip04_decrypt(self, pubkey: str, ciphertext: str) -> str:
        self.calls.append(("nip04_decrypt", (pubkey, ciphertext)))
        if self.fail_with is not None:
            raise self.fail_with
        prefix = f"nip04:{pubkey}:"
        if not ciphertext.startswith(prefix):
            raise ValueError("invalid ciphertext")
        return ciphertext[len(prefix):][::-1]

    async def nip44_encrypt(self, pubkey: str, plaintext: str) -> str:
        self.calls.append(("nip44_encrypt", (pubkey, plaintext)))
        await self._maybe_wait()
        return f"nip44:{pubkey}:{plaintext[::-1]}"

    async def nip44_decrypt(self, pubkey: str, ciphertext: str) -> str:
        self.calls.append(("nip44_decrypt", (pubkey, ciphertext)))
        await self._maybe_wait()
        prefix = f"nip44:{pubkey}:"
        if not ciphertext.startswith(prefix):
            raise ValueError("invalid ciphertext")
        return ciphertext[len(prefix):][::-1]


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def store(blobs: MemoryBlobStore) -> IdentityStore:
    identity_store = IdentityStore(blobs)
    identity_store.provision()
    identity_store.grant_origin(APP_ORIGIN)
    return identity_store


@pytest.fixture
def signers() -> list[FakeSigner]:
    return []


@pytest.fixture
def fake_signer_factory(signers: list[FakeSigner]):
    def factory(identity: Identity) -> FakeSigner:
        signer = FakeSigner(identity)
        signers.append(signer)
        return signer

    return factory
