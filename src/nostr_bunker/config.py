"""
Configuration constants and resolvers for nostr-bunker.

Resolvers take an explicit value first, then the environment, then the default.
"""

from __future__ import annotations

import os
from pathlib import Path

from nostr_bunker.types import RelayPolicy

IDENTITY_KEY = "nostr_identity"
DEFAULT_BUNKER_HOME = str(Path.home() / ".nostr-bunker")
DEFAULT_TIMEOUT_SECONDS = 60.0

# Static relay configuration returned by getRelays.
DEFAULT_RELAYS: dict[str, RelayPolicy] = {
    "wss://relay.damus.io": RelayPolicy(read=True, write=True),
    "wss://relay.nostr.band": RelayPolicy(read=True, write=True),
    "wss://nos.lol": RelayPolicy(read=True, write=True),
}


def resolve_home_dir(explicit_home_dir: str | None = None) -> str:
    return explicit_home_dir or os.environ.get("NOSTR_BUNKER_HOME") or DEFAULT_BUNKER_HOME


def resolve_signer_url(explicit: str | None = None) -> str:
    signer_url = explicit or os.environ.get("NOSTR_BUNKER_SIGNER_URL")
    if not signer_url:
        raise ValueError("Signer URL is required. Pass it explicitly or set NOSTR_BUNKER_SIGNER_URL.")
    return signer_url


def parse_timeout(value: float | None) -> float | None:
    """Seconds to wait for a response; None or 0 means wait forever."""
    if value is None or value == 0:
        return None
    if value < 0 or value != value:
        raise ValueError(f"Timeout must be a non-negative number of seconds, got {value!r}")
    return float(value)


def resolve_timeout() -> float | None:
    raw = os.environ.get("NOSTR_BUNKER_TIMEOUT")
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SECONDS
    if raw.strip().lower() == "none":
        return None
    try:
        return parse_timeout(float(raw))
    except ValueError:
        raise ValueError(
            f"NOSTR_BUNKER_TIMEOUT must be 'none' or a non-negative number of seconds, got {raw!r}",
        )
