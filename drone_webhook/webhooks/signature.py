"""HTTP Signatures (HMAC-SHA256) over the Date and Digest headers."""

import base64
import hashlib
import hmac
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Mapping, Optional

import httpx

from drone_webhook.core.exceptions import SignatureException

SIGNATURE_HEADER = "Signature"
DIGEST_PREFIX = "SHA-256="

_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')


def digest(body: bytes) -> str:
    """Return base64 encoded SHA-256 of the body."""
    return base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")


def digest_header(body: bytes) -> str:
    """Return the ``Digest`` header value for the body."""
    return DIGEST_PREFIX + digest(body)


def http_date(now: Optional[datetime] = None) -> str:
    """Format a timestamp as an HTTP date (IMF-fixdate, GMT)."""
    now = now or datetime.now(timezone.utc)
    return format_datetime(now.astimezone(timezone.utc), usegmt=True)


def parse_signature_header(value: str) -> dict[str, str]:
    """Parse ``key="value"`` pairs of a Signature header.

    Args:
        value: Raw header value

    Returns:
        Mapping of parameter name to value
    """
    params = dict(_PARAM_RE.findall(value))
    if "signature" not in params:
        raise SignatureException("signature parameter missing", details={"header": value})
    return params


@dataclass(frozen=True)
class Signer:
    """Signs requests with a shared secret over a fixed header list."""

    key_id: str = "hmac-key"
    algorithm: str = "hmac-sha256"
    headers: tuple[str, ...] = ("date", "digest")

    def signing_string(self, headers: Mapping[str, str]) -> str:
        """Build the canonical string covered by the signature.

        Args:
            headers: Request headers

        Returns:
            ``name: value`` lines joined by newlines in declared order
        """
        headers = httpx.Headers(headers)
        lines = []
        for name in self.headers:
            value = headers.get(name)
            if value is None:
                raise SignatureException(
                    f"missing required header: {name}",
                    details={"header": name},
                )
            lines.append(f"{name.lower()}: {value}")
        return "\n".join(lines)

    def sign(self, secret: str, headers: Mapping[str, str]) -> str:
        """Compute the base64 HMAC-SHA256 signature for the headers."""
        mac = hmac.new(
            secret.encode("utf-8"),
            self.signing_string(headers).encode("utf-8"),
            hashlib.sha256,
        )
        return base64.b64encode(mac.digest()).decode("ascii")

    def signature_header(self, secret: str, headers: Mapping[str, str]) -> str:
        """Render the Signature header value."""
        return (
            f'keyId="{self.key_id}",'
            f'algorithm="{self.algorithm}",'
            f'signature="{self.sign(secret, headers)}",'
            f'headers="{" ".join(self.headers)}"'
        )

    def sign_request(self, request: httpx.Request, secret: str) -> None:
        """Attach the Signature header to an outbound request."""
        request.headers[SIGNATURE_HEADER] = self.signature_header(secret, request.headers)

    def verify(
        self,
        headers: Mapping[str, str],
        secret: str,
        body: Optional[bytes] = None,
    ) -> None:
        """Verify a signed request as a receiver would.

        Args:
            headers: Received headers
            secret: Shared secret
            body: Raw request body; when given the Digest header is checked too

        Raises:
            SignatureException: If the digest or signature does not match
        """
        headers = httpx.Headers(headers)
        raw = headers.get(SIGNATURE_HEADER)
        if raw is None:
            raise SignatureException("missing Signature header")
        params = parse_signature_header(raw)

        if params.get("algorithm", self.algorithm) != self.algorithm:
            raise SignatureException(
                "unsupported signature algorithm",
                details={"algorithm": params.get("algorithm")},
            )
        if params.get("keyId") != self.key_id:
            raise SignatureException(
                "unknown signature key id",
                details={"key_id": params.get("keyId")},
            )
        covered = tuple(params.get("headers", "date").lower().split())
        if covered != self.headers:
            raise SignatureException(
                "unexpected signed header list",
                details={"headers": covered},
            )

        if body is not None:
            expected_digest = digest_header(body)
            if not hmac.compare_digest(headers.get("digest", ""), expected_digest):
                raise SignatureException("digest mismatch")

        expected = self.sign(secret, headers)
        if not hmac.compare_digest(params["signature"], expected):
            raise SignatureException("signature mismatch", details={"key_id": params.get("keyId")})
