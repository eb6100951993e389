"""Request signing.

This module provides:
- Signer: computes the Authorization header value for service requests

A signature is the base64 encoding of HMAC-SHA1(secret_key, plain) followed
by the plain text itself, where plain is the canonical string
``a=<appid>&k=<secret_id>&e=<expired>&t=<now>&r=<nonce>&f=<file_id>&b=<bucket>``.

Two modes exist:
- multi-use: a future expiry and an empty file id, reusable until it expires
- single-use: expiry 0, bound to exactly one resource id (used for deletes)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Callable

from cossync.core.config import Credentials

NONCE_LIMIT = 999999999


class Signer:
    """Signs requests with the account credentials."""

    def __init__(
        self,
        credentials: Credentials,
        clock: Callable[[], float] = time.time,
        nonce: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the signer.

        Args:
            credentials: Account credentials (read-only, shared).
            clock: Source of the current time in seconds.
            nonce: Source of random nonces (defaults to a CSPRNG).
        """
        self._credentials = credentials
        self._clock = clock
        self._nonce = nonce or (lambda: secrets.randbelow(NONCE_LIMIT))

    def now(self) -> int:
        """Current time in whole seconds, as used in signatures."""
        return int(self._clock())

    def sign(self, bucket: str, file_id: str, expired: int) -> str:
        """Compute a signature.

        Args:
            bucket: Bucket name.
            file_id: Exact resource id for single-use signatures, else "".
            expired: Absolute expiry timestamp, 0 for single-use signatures.

        Returns:
            Base64 signature suitable for the Authorization header.
        """
        creds = self._credentials
        plain = (
            f"a={creds.appid}&k={creds.secret_id}&e={expired}"
            f"&t={self.now()}&r={self._nonce()}&f={file_id}&b={bucket}"
        ).encode("utf-8")
        digest = hmac.new(creds.secret_key.encode("utf-8"), plain, hashlib.sha1).digest()
        return base64.b64encode(digest + plain).decode("ascii")

    def sign_more(self, bucket: str, expired: int) -> str:
        """Multi-use signature valid until ``expired``."""
        return self.sign(bucket, "", expired)

    def sign_once(self, bucket: str, file_id: str) -> str:
        """Single-use signature bound to ``file_id``."""
        return self.sign(bucket, file_id, 0)
