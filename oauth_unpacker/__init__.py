"""OAuth credential unpacking for inbound HTTP requests.

This package extracts OAuth parameters from a request and classifies it:
- Key/value parsing of query strings, form bodies and Authorization headers
- Composable key/value handlers (filtering, collecting, unquoting)
- OAuth 1.0a and OAuth 2.0 request descriptors
- A Flask request adapter and YAML configuration
"""

from oauth_unpacker.config import load_config
from oauth_unpacker.handlers import (
    DuplicateKeyValueHandler,
    KeyValueHandler,
    NotOAuthKeyValueHandler,
    OAuth2HeaderKeyValueHandler,
    OAuthKeyValueHandler,
    QuotedValueKeyValueHandler,
    fold_last_wins,
)
from oauth_unpacker.params import OAuthParams
from oauth_unpacker.parsers import (
    ConstKeyValueParser,
    KeyValueParser,
    StandardKeyValueParser,
    header_parser,
    query_parser,
)
from oauth_unpacker.request import (
    HttpRequest,
    OAuth1Request,
    OAuth1RequestBuilder,
    OAuth2Request,
    OAuthRequest,
    SimpleHttpRequest,
)
from oauth_unpacker.unpacker import (
    MalformedRequest,
    UnknownAuthType,
    Unpacker,
    UnpackerConfig,
    UnpackerException,
    UnpackErrorKind,
    UnpackResult,
    standard_path_getter,
    standard_scheme_getter,
)

__all__ = [
    # Parsers
    "KeyValueParser",
    "ConstKeyValueParser",
    "StandardKeyValueParser",
    "query_parser",
    "header_parser",
    # Handlers
    "KeyValueHandler",
    "DuplicateKeyValueHandler",
    "NotOAuthKeyValueHandler",
    "OAuthKeyValueHandler",
    "QuotedValueKeyValueHandler",
    "OAuth2HeaderKeyValueHandler",
    "fold_last_wins",
    # Accumulator
    "OAuthParams",
    # Requests
    "HttpRequest",
    "SimpleHttpRequest",
    "OAuth1Request",
    "OAuth2Request",
    "OAuthRequest",
    "OAuth1RequestBuilder",
    # Unpacker
    "Unpacker",
    "UnpackerConfig",
    "UnpackResult",
    "UnpackErrorKind",
    "UnpackerException",
    "UnknownAuthType",
    "MalformedRequest",
    "standard_scheme_getter",
    "standard_path_getter",
    # Config
    "load_config",
]
