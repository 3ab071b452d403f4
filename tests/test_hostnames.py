"""Hostname validation, apex detection and verification tokens."""

import pytest

from domainflow.core.exceptions import ValidationError
from domainflow.services.hostnames import (
    TOKEN_PREFIX,
    generate_verification_token,
    is_apex,
    is_reserved,
    split_hostname,
    subdomain_label,
    validate_hostname,
)


@pytest.mark.parametrize(
    "hostname, apex",
    [
        ("example.com", True),
        ("www.example.com", False),
        ("example.co.uk", True),
        ("shop.example.co.uk", False),
        ("a.b.example.com.au", False),
        ("brand.io", True),
    ],
)
def test_apex_classification(hostname, apex):
    assert is_apex(hostname) is apex


def test_split_keeps_multi_level_suffix_in_registrable_part():
    assert split_hostname("shop.example.co.uk") == ("shop", "example.co.uk")
    assert split_hostname("a.b.example.com") == ("a.b", "example.com")
    assert split_hostname("example.com") == ("", "example.com")


def test_subdomain_label_is_leftmost_label():
    assert subdomain_label("app.example.com") == "app"
    assert subdomain_label("a.b.example.com") == "a"
    assert subdomain_label("example.com") == "@"


def test_validate_normalizes_case_whitespace_and_trailing_dot():
    assert validate_hostname("  WWW.Example.COM. ") == "www.example.com"


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "localhost", "no_underscores.com", "-bad.example.com", "example", "http://example.com"],
)
def test_validate_rejects_malformed(raw):
    with pytest.raises(ValidationError):
        validate_hostname(raw)


def test_reserved_names_and_their_subdomains_are_rejected():
    reserved = ["netlify.app", "localhost"]
    assert is_reserved("netlify.app", reserved)
    assert is_reserved("mysite.netlify.app", reserved)
    assert not is_reserved("notnetlify.app", reserved)
    with pytest.raises(ValidationError, match="reserved"):
        validate_hostname("brand.netlify.app", reserved)


def test_tokens_are_prefixed_and_unique():
    first, second = generate_verification_token(), generate_verification_token()
    assert first.startswith(TOKEN_PREFIX)
    assert len(first) == len(TOKEN_PREFIX) + 32
    assert first != second
