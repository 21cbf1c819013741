"""nostr-bunker: an isolated Nostr signer and the client SDK that talks to it."""

from nostr_bunker.authorization import authorize, normalize_origin
from nostr_bunker.channel import MessageEvent, Window, WindowGroup, WindowProxy
from nostr_bunker.client import NostrClient
from nostr_bunker.config import DEFAULT_RELAYS, IDENTITY_KEY
from nostr_bunker.crypto import NostrSigner, Signer, derive_public_key, generate_keys, verify_event
from nostr_bunker.dispatcher import Dispatcher
from nostr_bunker.errors import (
    BunkerError,
    CryptoFailureError,
    InvalidParamsError,
    MalformedRequestError,
    MissingIdentityError,
    NotConnectedError,
    OriginRejectedError,
    RequestTimeoutError,
    SignerError,
    StorageUnavailableError,
    UnsupportedMethodError,
)
from nostr_bunker.identity_store import IdentityStore
from nostr_bunker.storage import BlobStore, FileBlobStore, MemoryBlobStore
from nostr_bunker.transport import SignerTransport, install_signer
from nostr_bunker.types import (
    REQUEST_TYPES,
    Identity,
    ProvisionResult,
    RelayPolicy,
    Request,
    Response,
)

__all__ = [
    "DEFAULT_RELAYS",
    "IDENTITY_KEY",
    "REQUEST_TYPES",
    "BlobStore",
    "BunkerError",
    "CryptoFailureError",
    "Dispatcher",
    "FileBlobStore",
    "Identity",
    "IdentityStore",
    "InvalidParamsError",
    "MalformedRequestError",
    "MemoryBlobStore",
    "MessageEvent",
    "MissingIdentityError",
    "NostrClient",
    "NostrSigner",
    "NotConnectedError",
    "OriginRejectedError",
    "ProvisionResult",
    "RelayPolicy",
    "Request",
    "RequestTimeoutError",
    "Response",
    "Signer",
    "SignerError",
    "SignerTransport",
    "StorageUnavailableError",
    "UnsupportedMethodError",
    "Window",
    "WindowGroup",
    "WindowProxy",
    "authorize",
    "derive_public_key",
    "generate_keys",
    "install_signer",
    "normalize_origin",
    "verify_event",
]

__version__ = "0.0.1"
