"""
Data submission transport for the Avail backend.

Submits raw block bytes to the node RPC as a signed JSON-RPC call and
returns the resulting transaction hash.
"""
import hashlib
import itertools
import logging
from typing import Optional

import requests
from nacl.signing import SigningKey

from pyda.core.da.client import DecodeError, TransportError

logger = logging.getLogger(__name__)

SUBMIT_METHOD = "da_submitData"
TX_HASH_SIZE = 32


def signing_key_from_seed(seed: str) -> SigningKey:
    """Derive the ed25519 submission key from the configured seed.

    A 32-byte hex seed is used directly. Any other seed (e.g. a mnemonic
    phrase) is hashed with SHA-256 into a 32-byte key seed.
    """
    candidate = seed[2:] if seed.startswith("0x") else seed
    try:
        raw = bytes.fromhex(candidate)
    except ValueError:
        raw = b""
    if len(raw) != 32:
        raw = hashlib.sha256(seed.encode()).digest()
    return SigningKey(raw)


class DataSubmitter:
    """Signs block data and submits it to an Avail node."""

    def __init__(
        self,
        api_url: str,
        seed: str,
        app_id: int,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.app_id = app_id
        self.signing_key = signing_key_from_seed(seed)
        self.session = session or requests.Session()
        self._ids = itertools.count(1)

    @property
    def public_key(self) -> str:
        return "0x" + self.signing_key.verify_key.encode().hex()

    def build_request(self, data: bytes) -> dict:
        signature = self.signing_key.sign(data).signature
        return {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": SUBMIT_METHOD,
            "params": {
                "app_id": self.app_id,
                "data": "0x" + data.hex(),
                "signer": self.public_key,
                "signature": "0x" + signature.hex(),
            },
        }

    def submit_data(self, data: bytes, timeout: float) -> bytes:
        """Submit data and return the transaction hash.

        Args:
            data: Serialized block bytes
            timeout: Seconds to wait for the node to answer

        Returns:
            bytes: TX_HASH_SIZE-byte transaction hash

        Raises:
            TransportError: If the node cannot be reached or rejects the call
            DecodeError: If the node answers with an unexpected payload
        """
        payload = self.build_request(data)
        logger.debug(f"Submitting {len(data)} bytes to {self.api_url} with app_id={self.app_id}")

        try:
            response = self.session.post(
                self.api_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"data submission failed: {str(e)}") from e

        if response.status_code >= 400:
            raise TransportError(
                f"data submission failed: HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(
                f"invalid submission response: {str(e)}", payload=response.content
            ) from e

        if not isinstance(body, dict):
            raise DecodeError("invalid submission response: not an object", payload=response.content)

        if body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise TransportError(f"data submission rejected: {message}")

        result = body.get("result")
        if not isinstance(result, str):
            raise DecodeError("invalid submission response: missing tx hash", payload=response.content)

        try:
            tx_hash = bytes.fromhex(result[2:] if result.startswith("0x") else result)
        except ValueError as e:
            raise DecodeError(f"invalid tx hash {result!r}", payload=response.content) from e

        if len(tx_hash) != TX_HASH_SIZE:
            raise DecodeError(
                f"invalid tx hash length {len(tx_hash)}, expected {TX_HASH_SIZE}",
                payload=response.content,
            )
        return tx_hash
