"""OAuth parameter accumulator.

Collects the OAuth 1.0a protocol fields and the OAuth 2.0 token as
key/value pairs stream through the handler chain during one unpack call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Dict, Optional

logger = logging.getLogger(__name__)

OAUTH_PREFIX = "oauth_"

OAUTH_CONSUMER_KEY = "oauth_consumer_key"
OAUTH_TOKEN = "oauth_token"
OAUTH_SIGNATURE_METHOD = "oauth_signature_method"
OAUTH_SIGNATURE = "oauth_signature"
OAUTH_TIMESTAMP = "oauth_timestamp"
OAUTH_NONCE = "oauth_nonce"
OAUTH_VERSION = "oauth_version"
OAUTH_CALLBACK = "oauth_callback"

# Protocol parameter name -> OAuthParams attribute
OAUTH_FIELD_NAMES: Dict[str, str] = {
    OAUTH_CONSUMER_KEY: "consumer_key",
    OAUTH_TOKEN: "token",
    OAUTH_SIGNATURE_METHOD: "signature_method",
    OAUTH_SIGNATURE: "signature",
    OAUTH_TIMESTAMP: "timestamp",
    OAUTH_NONCE: "nonce",
    OAUTH_VERSION: "version",
    OAUTH_CALLBACK: "callback",
}

# Fields that only make sense for a signed OAuth 1.0a request
OAUTH1_REQUIRED_FIELDS = (
    "consumer_key",
    "signature_method",
    "signature",
    "timestamp",
    "nonce",
)


def is_oauth_key(key: str) -> bool:
    """Return True for keys in the reserved ``oauth_`` namespace."""
    return key.startswith(OAUTH_PREFIX)


@dataclass
class OAuthParams:
    """Mutable record of the OAuth fields seen so far.

    The last write for a field wins. The OAuth 2.0 bearer token is stored
    in ``token``, the same slot as ``oauth_token``.

    Attributes:
        consumer_key: oauth_consumer_key
        token: oauth_token, or the bearer token from an OAuth 2.0 header
        signature_method: oauth_signature_method (e.g. "HMAC-SHA1")
        signature: oauth_signature, as received
        timestamp: oauth_timestamp, as received
        nonce: oauth_nonce
        version: oauth_version (optional, usually "1.0")
        callback: oauth_callback (optional)
    """

    consumer_key: Optional[str] = None
    token: Optional[str] = None
    signature_method: Optional[str] = None
    signature: Optional[str] = None
    timestamp: Optional[str] = None
    nonce: Optional[str] = None
    version: Optional[str] = None
    callback: Optional[str] = None

    def set(self, key: str, value: str) -> bool:
        """Store ``value`` under the protocol parameter ``key``.

        Args:
            key: Protocol parameter name, e.g. "oauth_nonce"
            value: Raw parameter value

        Returns:
            True if the key is a recognized OAuth field, False otherwise
        """
        attribute = OAUTH_FIELD_NAMES.get(key)
        if attribute is None:
            return False
        if getattr(self, attribute) is not None:
            logger.debug("Overwriting previously seen %s", key)
        setattr(self, attribute, value)
        return True

    @property
    def all_oauth1_fields_set(self) -> bool:
        """True when every field needed for a signed OAuth 1.0a request is present."""
        return all(getattr(self, name) is not None for name in OAUTH1_REQUIRED_FIELDS)

    @property
    def only_oauth_token_set(self) -> bool:
        """True when the token is present and no OAuth 1.0a-only field is."""
        return self.token is not None and all(
            getattr(self, name) is None for name in OAUTH1_REQUIRED_FIELDS
        )

    def to_dict(self) -> Dict[str, str]:
        """Return the fields that are set, keyed by protocol parameter name."""
        names = {attribute: key for key, attribute in OAUTH_FIELD_NAMES.items()}
        return {
            names[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
