"""Hostname normalization, validation, and apex / subdomain classification."""

from __future__ import annotations

import re
import secrets
import string
from collections.abc import Iterable

from domainflow.core.exceptions import ValidationError

# Public suffixes made of more than one label. A hostname ending in one of
# these keeps one extra label in its registrable part (example.co.uk).
MULTI_LEVEL_SUFFIXES: tuple[str, ...] = (
    "co.uk", "org.uk", "ac.uk", "gov.uk", "com.au", "net.au", "org.au",
    "co.nz", "org.nz", "co.jp", "ne.jp", "com.br", "org.br", "co.in",
    "net.in", "com.cn", "net.cn", "co.za", "org.za", "com.mx", "org.mx",
    "co.kr", "or.kr", "com.sg", "net.sg", "com.hk", "net.hk", "co.th",
    "or.th", "com.my", "net.my", "co.id", "or.id", "com.tw", "net.tw",
    "com.ph", "net.ph", "com.vn", "net.vn", "co.il", "org.il", "com.pl",
    "net.pl", "com.ar", "net.ar", "com.co", "net.co", "com.pe", "net.pe",
)

_HOSTNAME_RE = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,}$"
)
_MAX_HOSTNAME_LENGTH = 253

TOKEN_PREFIX = "dfv_"
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def normalize_hostname(raw: str) -> str:
    return raw.strip().lower().rstrip(".")


def is_reserved(hostname: str, reserved: Iterable[str]) -> bool:
    """True for a reserved name itself or any host beneath it."""
    return any(
        hostname == name or hostname.endswith(f".{name}") for name in reserved
    )


def validate_hostname(raw: str, reserved: Iterable[str] = ()) -> str:
    """Return the normalized hostname or raise :class:`ValidationError`."""
    if raw is None or not raw.strip():
        raise ValidationError("Hostname cannot be empty")
    hostname = normalize_hostname(raw)
    if len(hostname) > _MAX_HOSTNAME_LENGTH or not _HOSTNAME_RE.match(hostname):
        raise ValidationError(f"Invalid hostname format: '{raw.strip()}'")
    if is_reserved(hostname, reserved):
        raise ValidationError(f"Hostname '{hostname}' is reserved and cannot be used")
    return hostname


def _matched_suffix(hostname: str) -> str | None:
    for suffix in MULTI_LEVEL_SUFFIXES:
        if hostname.endswith(f".{suffix}"):
            return suffix
    return None


def split_hostname(hostname: str) -> tuple[str, str]:
    """Split into (subdomain part, registrable domain).

    ``shop.example.co.uk`` -> ``("shop", "example.co.uk")``;
    ``example.com`` -> ``("", "example.com")``.
    """
    hostname = normalize_hostname(hostname)
    suffix = _matched_suffix(hostname)
    if suffix is not None:
        head = hostname[: -(len(suffix) + 1)]
        labels = head.split(".")
        registrable = f"{labels[-1]}.{suffix}"
        return ".".join(labels[:-1]), registrable

    labels = hostname.split(".")
    if len(labels) <= 2:
        return "", hostname
    return ".".join(labels[:-2]), ".".join(labels[-2:])


def is_apex(hostname: str) -> bool:
    hostname = normalize_hostname(hostname)
    suffix = _matched_suffix(hostname)
    if suffix is not None:
        return "." not in hostname[: -(len(suffix) + 1)]
    return len(hostname.split(".")) == 2


def subdomain_label(hostname: str) -> str:
    """Leftmost label of the subdomain part (``www`` for ``www.example.com``)."""
    sub, _ = split_hostname(hostname)
    return sub.split(".")[0] if sub else "@"


def generate_verification_token() -> str:
    return TOKEN_PREFIX + "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(32))
