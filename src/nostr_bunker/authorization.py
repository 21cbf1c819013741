"""Origin allow-list checks for the signer."""

from __future__ import annotations

from urllib.parse import urlsplit

from nostr_bunker.types import Identity

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


def normalize_origin(value: str) -> str:
    """Reduce a URL or origin to ``scheme://host[:port]``."""
    raw = value.strip()
    if not raw:
        raise ValueError("Origin is required")

    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if not scheme or not parts.hostname:
        raise ValueError(f"Origin must include a scheme and host: {value!r}")

    try:
        port = parts.port
    except ValueError:
        raise ValueError(f"Origin has an invalid port: {value!r}")

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def authorize(identity: Identity | None, origin: str | None) -> bool:
    # Literal membership only; no wildcard or pattern matching.
    if identity is None or not origin:
        return False
    return origin in identity.allowed_origins
