"""Request descriptors and the HTTP request accessor contract.

The unpacker reads an inbound request only through ``HttpRequest`` and
produces either an ``OAuth1Request`` or an ``OAuth2Request``.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from oauth_unpacker.params import OAuthParams


class HttpRequest(ABC):
    """Read-only view of an inbound HTTP request.

    Implementations adapt a web framework's request object. Properties:
    method, scheme, path, server_name, server_port, query_string,
    content_type and content_length.
    """

    @property
    @abstractmethod
    def method(self) -> str: ...

    @property
    @abstractmethod
    def scheme(self) -> str: ...

    @property
    @abstractmethod
    def path(self) -> str: ...

    @property
    @abstractmethod
    def server_name(self) -> str: ...

    @property
    @abstractmethod
    def server_port(self) -> int: ...

    @property
    @abstractmethod
    def query_string(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def content_type(self) -> Optional[str]: ...

    @property
    @abstractmethod
    def content_length(self) -> Optional[int]: ...

    @abstractmethod
    def get_header(self, name: str) -> Optional[str]:
        """Return the raw value of header ``name`` (case-insensitive), or None."""

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes of the body; b"" at end of stream."""


class SimpleHttpRequest(HttpRequest):
    """In-memory request, for tests and for callers without a web framework.

    Args:
        method: HTTP verb
        scheme: URI scheme ("http" or "https")
        server_name: Host name
        server_port: Port number
        path: Request path
        query_string: Raw query string without the leading "?"
        headers: Header name -> value
        body: Raw body bytes
        content_type: Content-Type, falls back to the headers mapping
        content_length: Declared length, defaults to ``len(body)``

    The body is a stream and can be read only once; build a new request to
    unpack the same data again.
    """

    def __init__(
        self,
        method: str = "GET",
        scheme: str = "http",
        server_name: str = "localhost",
        server_port: int = 80,
        path: str = "/",
        query_string: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: bytes = b"",
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ):
        self._method = method
        self._scheme = scheme
        self._server_name = server_name
        self._server_port = server_port
        self._path = path
        self._query_string = query_string
        self._headers = {name.lower(): value for name, value in (headers or {}).items()}
        self._content_type = content_type or self._headers.get("content-type")
        self._content_length = len(body) if content_length is None else content_length
        self._body = io.BytesIO(body)

    @property
    def method(self) -> str:
        return self._method

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def path(self) -> str:
        return self._path

    @property
    def server_name(self) -> str:
        return self._server_name

    @property
    def server_port(self) -> int:
        return self._server_port

    @property
    def query_string(self) -> Optional[str]:
        return self._query_string

    @property
    def content_type(self) -> Optional[str]:
        return self._content_type

    @property
    def content_length(self) -> Optional[int]:
        return self._content_length

    def get_header(self, name: str) -> Optional[str]:
        return self._headers.get(name.lower())

    def read(self, size: int) -> bytes:
        return self._body.read(size)


@dataclass(frozen=True)
class OAuth1Request:
    """A request carrying OAuth 1.0a signature parameters.

    ``scheme`` and ``verb`` are upper-cased. ``params`` holds the non-OAuth
    query and body parameters in arrival order.
    """

    scheme: str
    verb: str
    host: str
    port: int
    path: str
    consumer_key: str
    signature_method: str
    signature: str
    timestamp: str
    nonce: str
    token: Optional[str] = None
    version: Optional[str] = None
    callback: Optional[str] = None
    params: Tuple[Tuple[str, str], ...] = ()

    oauth_version = 1

    @property
    def oauth_params(self) -> Dict[str, str]:
        """The OAuth protocol parameters that are set, keyed by protocol name."""
        return OAuthParams(
            consumer_key=self.consumer_key,
            token=self.token,
            signature_method=self.signature_method,
            signature=self.signature,
            timestamp=self.timestamp,
            nonce=self.nonce,
            version=self.version,
            callback=self.callback,
        ).to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "oauth_version": self.oauth_version,
            "scheme": self.scheme,
            "verb": self.verb,
            "host": self.host,
            "port": self.port,
            "path": self.path,
            "params": [list(pair) for pair in self.params],
            "oauth_params": self.oauth_params,
        }


@dataclass(frozen=True)
class OAuth2Request:
    """A request authenticated by an OAuth 2.0 bearer token."""

    token: str

    oauth_version = 2

    def to_dict(self) -> Dict[str, Any]:
        return {"oauth_version": self.oauth_version, "token": self.token}


OAuthRequest = Union[OAuth1Request, OAuth2Request]


@dataclass
class OAuth1RequestBuilder:
    """Assembles an OAuth1Request from accumulated parameters.

    The request metadata is filled in by the unpacker before ``build``.
    """

    params: List[Tuple[str, str]]
    oauth_params: OAuthParams
    scheme: str = ""
    verb: str = ""
    host: str = ""
    port: int = 0
    path: str = ""

    def build(self) -> OAuth1Request:
        if not self.oauth_params.all_oauth1_fields_set:
            raise ValueError("OAuth 1.0a parameters are incomplete")
        oauth = self.oauth_params
        return OAuth1Request(
            scheme=self.scheme.upper(),
            verb=self.verb.upper(),
            host=self.host,
            port=self.port,
            path=self.path,
            consumer_key=oauth.consumer_key,
            signature_method=oauth.signature_method,
            signature=oauth.signature,
            timestamp=oauth.timestamp,
            nonce=oauth.nonce,
            token=oauth.token,
            version=oauth.version,
            callback=oauth.callback,
            params=tuple(self.params),
        )
