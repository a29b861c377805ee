"""Tests for request digest and HTTP signature helpers."""

import base64
import hashlib
import hmac
from datetime import datetime, timezone

import httpx
import pytest

from drone_webhook.core.exceptions import SignatureException
from drone_webhook.webhooks.signature import (
    Signer,
    digest,
    digest_header,
    http_date,
    parse_signature_header,
)

DATE = "Sun, 18 Oct 2026 09:07:00 GMT"


def _hmac_b64(secret: str, message: str) -> str:
    mac = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(mac).decode()


def test_digest_matches_sha256() -> None:
    """Test digest is base64 of the SHA-256 of the body."""
    body = b'{"event":"build"}'
    expected = base64.b64encode(hashlib.sha256(body).digest()).decode()

    assert digest(body) == expected
    assert digest_header(body) == f"SHA-256={expected}"


def test_digest_of_empty_body() -> None:
    """Test digest of an empty body."""
    assert digest(b"") == "47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="


def test_http_date_format() -> None:
    """Test HTTP date is IMF-fixdate in GMT."""
    now = datetime(2026, 1, 5, 7, 3, 9, tzinfo=timezone.utc)

    assert http_date(now) == "Mon, 05 Jan 2026 07:03:09 GMT"


def test_http_date_defaults_to_now() -> None:
    """Test HTTP date without argument ends with GMT."""
    assert http_date().endswith(" GMT")


def test_signing_string_order() -> None:
    """Test signing string uses declared header order and lowercase names."""
    signer = Signer()
    headers = {"Digest": "SHA-256=abc", "Date": DATE}

    assert signer.signing_string(headers) == f"date: {DATE}\ndigest: SHA-256=abc"


def test_signing_string_missing_header() -> None:
    """Test missing covered header raises SignatureException."""
    with pytest.raises(SignatureException) as exc_info:
        Signer().signing_string({"Date": DATE})

    assert exc_info.value.details == {"header": "digest"}


def test_sign_is_deterministic_and_independent() -> None:
    """Test signature matches an independent HMAC-SHA256 computation."""
    signer = Signer()
    headers = {"date": DATE, "digest": "SHA-256=abc"}
    expected = _hmac_b64("s3cr3t", f"date: {DATE}\ndigest: SHA-256=abc")

    assert signer.sign("s3cr3t", headers) == expected
    assert signer.sign("s3cr3t", headers) == signer.sign("s3cr3t", headers)
    assert signer.sign("other", headers) != expected


def test_sign_request_sets_header() -> None:
    """Test signing an httpx request attaches a Signature header."""
    body = b"{}"
    request = httpx.Request(
        "POST",
        "https://example.com/hook",
        content=body,
        headers={"Date": DATE, "Digest": digest_header(body)},
    )

    Signer().sign_request(request, "s3cr3t")

    params = parse_signature_header(request.headers["Signature"])
    assert params["keyId"] == "hmac-key"
    assert params["algorithm"] == "hmac-sha256"
    assert params["headers"] == "date digest"
    assert params["signature"] == _hmac_b64(
        "s3cr3t", f"date: {DATE}\ndigest: {digest_header(body)}"
    )


def test_parse_signature_header_requires_signature() -> None:
    """Test parsing rejects a header without a signature parameter."""
    with pytest.raises(SignatureException):
        parse_signature_header('keyId="hmac-key",algorithm="hmac-sha256"')


class TestVerify:
    """Receiver-side verification."""

    def _signed_headers(self, body: bytes, secret: str = "s3cr3t") -> dict[str, str]:
        headers = {"Date": DATE, "Digest": digest_header(body)}
        headers["Signature"] = Signer().signature_header(secret, headers)
        return headers

    def test_verify_accepts_valid_request(self) -> None:
        body = b'{"event":"repo"}'
        Signer().verify(self._signed_headers(body), "s3cr3t", body=body)

    def test_verify_rejects_wrong_secret(self) -> None:
        body = b'{"event":"repo"}'
        with pytest.raises(SignatureException, match="signature mismatch"):
            Signer().verify(self._signed_headers(body), "wrong", body=body)

    def test_verify_rejects_tampered_body(self) -> None:
        headers = self._signed_headers(b'{"event":"repo"}')
        with pytest.raises(SignatureException, match="digest mismatch"):
            Signer().verify(headers, "s3cr3t", body=b'{"event":"user"}')

    def test_verify_rejects_tampered_date(self) -> None:
        headers = self._signed_headers(b"{}")
        headers["Date"] = "Mon, 19 Oct 2026 09:07:00 GMT"
        with pytest.raises(SignatureException):
            Signer().verify(headers, "s3cr3t")

    def test_verify_requires_signature_header(self) -> None:
        with pytest.raises(SignatureException, match="missing Signature header"):
            Signer().verify({"Date": DATE}, "s3cr3t")

    def test_verify_rejects_other_algorithm(self) -> None:
        headers = self._signed_headers(b"{}")
        headers["Signature"] = headers["Signature"].replace("hmac-sha256", "rsa-sha256")
        with pytest.raises(SignatureException, match="unsupported"):
            Signer().verify(headers, "s3cr3t")

    def test_verify_rejects_unknown_key_id(self) -> None:
        headers = self._signed_headers(b"{}")
        headers["Signature"] = headers["Signature"].replace('keyId="hmac-key"', 'keyId="other"')
        with pytest.raises(SignatureException, match="unknown signature key id"):
            Signer().verify(headers, "s3cr3t")


def test_signature_header_parameter_order() -> None:
    """Test header parameters are emitted as keyId, algorithm, signature, headers."""
    headers = {"date": DATE, "digest": "SHA-256=abc"}
    expected = _hmac_b64("s3cr3t", f"date: {DATE}\ndigest: SHA-256=abc")

    value = Signer().signature_header("s3cr3t", headers)

    assert value == (
        'keyId="hmac-key",algorithm="hmac-sha256",'
        f'signature="{expected}",headers="date digest"'
    )
