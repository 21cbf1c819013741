"""Identity record lifecycle for the signer."""

from __future__ import annotations

import json
import logging
from typing import Callable

from nostr_bunker.authorization import normalize_origin
from nostr_bunker.config import IDENTITY_KEY
from nostr_bunker.crypto import derive_public_key, generate_keys
from nostr_bunker.errors import MissingIdentityError, StorageUnavailableError
from nostr_bunker.storage import BlobStore
from nostr_bunker.types import Identity, JsonDict, ProvisionResult

logger = logging.getLogger(__name__)

KeyFactory = Callable[[], "tuple[str, str]"]


def _parse_record(blob: bytes) -> JsonDict:
    try:
        raw = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise MissingIdentityError()
    if not isinstance(raw, dict):
        raise MissingIdentityError()
    return JsonDict(raw)


def _identity_from_record(raw: JsonDict) -> Identity:
    nsec = raw.get("nsec")
    npub = raw.get("npub")
    if not isinstance(nsec, str) or not isinstance(npub, str) or not nsec or not npub:
        raise MissingIdentityError()

    try:
        public_key, expected_npub = derive_public_key(nsec)
    except Exception as error:
        raise MissingIdentityError(f"Identity secret key is invalid: {error}")

    if npub != expected_npub:
        raise MissingIdentityError("Public key mismatch in identity record")

    origins_raw = raw.get("allowedOrigins") or []
    if not isinstance(origins_raw, list) or not all(isinstance(origin, str) for origin in origins_raw):
        raise MissingIdentityError("Identity allowedOrigins must be a list of strings")

    return Identity(
        nsec=nsec,
        npub=npub,
        public_key=public_key,
        allowed_origins=frozenset(origins_raw),
    )


class IdentityStore:
    """Loads and persists the single identity record held in a blob store."""

    def __init__(
        self,
        blobs: BlobStore | None,
        key: str = IDENTITY_KEY,
        *,
        key_factory: KeyFactory = generate_keys,
    ):
        self._blobs = blobs
        self._key = key
        self._key_factory = key_factory

    @property
    def key(self) -> str:
        return self._key

    def _require_blobs(self) -> BlobStore:
        if self._blobs is None:
            raise StorageUnavailableError("Identity storage is not available in this environment")
        return self._blobs

    def load(self) -> Identity:
        if self._blobs is None:
            raise MissingIdentityError()
        blob = self._blobs.get(self._key)
        if blob is None:
            raise MissingIdentityError()
        return _identity_from_record(_parse_record(blob))

    def save(self, identity: Identity) -> None:
        blobs = self._require_blobs()
        blobs.set(self._key, json.dumps(identity.to_record(), indent=2).encode("utf-8"))

    def provision(self) -> ProvisionResult:
        """Create and persist a brand-new identity, replacing any previous one."""
        blobs = self._require_blobs()
        nsec, npub = self._key_factory()
        record = JsonDict({"nsec": nsec, "npub": npub, "allowedOrigins": []})
        blobs.set(self._key, json.dumps(record, indent=2).encode("utf-8"))
        logger.info("Provisioned new identity %s", npub)
        return ProvisionResult(nsec=nsec, npub=npub)

    def grant_origin(self, origin: str) -> Identity:
        identity = self.load()
        normalized = normalize_origin(origin)
        if normalized in identity.allowed_origins:
            return identity
        updated = Identity(
            nsec=identity.nsec,
            npub=identity.npub,
            public_key=identity.public_key,
            allowed_origins=identity.allowed_origins | {normalized},
        )
        self.save(updated)
        logger.info("Granted origin %s", normalized)
        return updated

    def revoke_origin(self, origin: str) -> Identity:
        identity = self.load()
        normalized = normalize_origin(origin)
        if normalized not in identity.allowed_origins:
            return identity
        updated = Identity(
            nsec=identity.nsec,
            npub=identity.npub,
            public_key=identity.public_key,
            allowed_origins=identity.allowed_origins - {normalized},
        )
        self.save(updated)
        logger.info("Revoked origin %s", normalized)
        return updated
