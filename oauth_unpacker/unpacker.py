"""Unpacks OAuth credentials from an inbound HTTP request.

The query string, a form-encoded POST body and the Authorization header
are run through the key/value parsers and handlers. The collected OAuth
parameters decide whether the request is an OAuth 1.0a signed request or
an OAuth 2.0 bearer request:

- every OAuth 1.0a field present: OAuth1Request
- only a token present, over HTTPS: OAuth2Request
- anything else: UnknownAuthType

``Unpacker.unpack`` returns an ``UnpackResult`` and does not raise for
problems with the request itself.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from oauth_unpacker.handlers import (
    DuplicateKeyValueHandler,
    KeyValue,
    KeyValueCallback,
    NotOAuthKeyValueHandler,
    OAuth2HeaderKeyValueHandler,
    OAuthKeyValueHandler,
    QuotedValueKeyValueHandler,
)
from oauth_unpacker.params import OAuthParams
from oauth_unpacker.parsers import (
    ConstKeyValueParser,
    KeyValueParser,
    header_parser,
    query_parser,
)
from oauth_unpacker.request import (
    HttpRequest,
    OAuth1RequestBuilder,
    OAuth2Request,
    OAuthRequest,
)

logger = logging.getLogger(__name__)

AUTH_HEADER_REGEX = re.compile(r"^(\S+)\s+(.*)$", re.DOTALL)
BEARER_TOKEN_INVALID = re.compile(r"[\s,]")
AUTHORIZATION = "Authorization"
POST = "POST"
WWW_FORM_URLENCODED = "application/x-www-form-urlencoded"
HTTPS = "HTTPS"

OAUTH1_HEADER_AUTHTYPE = "oauth"
OAUTH2_HEADER_AUTHTYPE = "bearer"

DEFAULT_CHUNK_SIZE = 4 * 1024
DEFAULT_CHARSET = "utf-8"

SchemeGetter = Callable[[HttpRequest], str]
PathGetter = Callable[[HttpRequest], str]


def standard_scheme_getter(request: HttpRequest) -> str:
    return request.scheme


def standard_path_getter(request: HttpRequest) -> str:
    return request.path


class UnpackErrorKind(str, Enum):
    """Why an unpack call failed."""

    UNKNOWN_AUTH_TYPE = "unknown_auth_type"
    MALFORMED_REQUEST = "malformed_request"
    UNPACKER = "unpacker"


class UnpackerException(Exception):
    """Request could not be unpacked.

    Attributes:
        message: Human-readable reason
        cause: The underlying exception, if any
    """

    kind = UnpackErrorKind.UNPACKER

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.__cause__ = cause


class UnknownAuthType(UnpackerException):
    """Neither OAuth 1.0a nor OAuth 2.0 credentials were found."""

    kind = UnpackErrorKind.UNKNOWN_AUTH_TYPE


class MalformedRequest(UnpackerException):
    """The request carries credentials but is not acceptable as sent."""

    kind = UnpackErrorKind.MALFORMED_REQUEST


@dataclass(frozen=True)
class UnpackResult:
    """Outcome of an unpack call: a request descriptor or an error."""

    request: Optional[OAuthRequest] = None
    error: Optional[UnpackerException] = None

    @classmethod
    def success(cls, request: OAuthRequest) -> "UnpackResult":
        return cls(request=request)

    @classmethod
    def failure(cls, error: UnpackerException) -> "UnpackResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[UnpackErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> OAuthRequest:
        """Return the request descriptor, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.request


@dataclass
class UnpackerConfig:
    """Collaborators and options for an Unpacker.

    Attributes:
        scheme_getter: Returns the URI scheme of a request
        path_getter: Returns the path of a request
        query_parser: Parser for the query string and form body
        header_parser: Parser for the OAuth 1.0a Authorization parameters
        oauth1_auth_types: Lower-case Authorization schemes read as OAuth 1.0a
        oauth2_auth_types: Lower-case Authorization schemes read as OAuth 2.0
        keep_duplicate_params: Keep every occurrence of a repeated non-OAuth
            parameter instead of only the last value
        body_chunk_size: Read size used for the request body
    """

    scheme_getter: SchemeGetter = standard_scheme_getter
    path_getter: PathGetter = standard_path_getter
    query_parser: KeyValueParser = field(default_factory=query_parser)
    header_parser: KeyValueParser = field(default_factory=header_parser)
    oauth1_auth_types: Tuple[str, ...] = (OAUTH1_HEADER_AUTHTYPE,)
    oauth2_auth_types: Tuple[str, ...] = (OAUTH2_HEADER_AUTHTYPE,)
    keep_duplicate_params: bool = False
    body_chunk_size: int = DEFAULT_CHUNK_SIZE


def _charset(content_type: str) -> str:
    for part in content_type.split(";")[1:]:
        name, _, value = part.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return DEFAULT_CHARSET


class Unpacker:
    """Turns an HttpRequest into an OAuth1Request or OAuth2Request.

    An Unpacker holds no per-request state and can be shared between threads
    as long as its configured collaborators can.
    """

    def __init__(self, config: Optional[UnpackerConfig] = None):
        self.config = config or UnpackerConfig()

    def __call__(
        self, request: HttpRequest, kv_handlers: Sequence[KeyValueCallback] = ()
    ) -> OAuthRequest:
        """Unpack ``request``, raising an UnpackerException on failure."""
        return self.unpack(request, kv_handlers).unwrap()

    def unpack(
        self, request: HttpRequest, kv_handlers: Sequence[KeyValueCallback] = ()
    ) -> UnpackResult:
        """Unpack the OAuth credentials of ``request``.

        Args:
            request: The inbound request
            kv_handlers: Callbacks invoked with every non-OAuth parameter of
                the query string and form body

        Returns:
            UnpackResult holding the request descriptor or the error
        """
        try:
            params, oauth_params = self.parse_request(request, kv_handlers)

            if oauth_params.all_oauth1_fields_set:
                logger.debug("Unpacked OAuth 1.0a request")
                builder = self.get_oauth1_request_builder(request, params, oauth_params)
                result = UnpackResult.success(builder.build())
            elif oauth_params.only_oauth_token_set:
                logger.debug("Unpacked OAuth 2.0 request")
                result = self.get_oauth2_request(request, oauth_params.token)
            else:
                result = UnpackResult.failure(
                    UnknownAuthType("could not determine the authentication type")
                )
        except UnpackerException as exc:
            result = UnpackResult.failure(exc)
        except Exception as exc:
            logger.exception("Could not unpack request")
            return UnpackResult.failure(
                UnpackerException(f"could not unpack request: {exc}", cause=exc)
            )

        if not result.ok:
            logger.warning("Rejected request: %s", result.error.message)
        return result

    def get_oauth1_request_builder(
        self,
        request: HttpRequest,
        params: List[KeyValue],
        oauth_params: OAuthParams,
    ) -> OAuth1RequestBuilder:
        builder = OAuth1RequestBuilder(params, oauth_params)
        builder.scheme = self.config.scheme_getter(request).upper()
        builder.verb = request.method.upper()
        builder.host = request.server_name
        builder.port = request.server_port
        builder.path = self.config.path_getter(request)
        return builder

    def get_oauth2_request(self, request: HttpRequest, token: str) -> UnpackResult:
        if self.config.scheme_getter(request).upper() != HTTPS:
            return UnpackResult.failure(MalformedRequest("OAuth 2.0 requests must use HTTPS"))
        return UnpackResult.success(OAuth2Request(token))

    def parse_request(
        self, request: HttpRequest, kv_handlers: Sequence[KeyValueCallback] = ()
    ) -> Tuple[List[KeyValue], OAuthParams]:
        """Run every credential source through the handler chain.

        Returns:
            Tuple of (non-OAuth params, collected OAuth params)
        """
        kv_handler = DuplicateKeyValueHandler()
        oauth_params = OAuthParams()
        oauth_kv_handler = OAuthKeyValueHandler(oauth_params)
        handlers: List[KeyValueCallback] = [
            NotOAuthKeyValueHandler(kv_handler),
            oauth_kv_handler,
            *(NotOAuthKeyValueHandler(handler) for handler in kv_handlers),
        ]

        self.config.query_parser(request.query_string, handlers)

        content_type = request.content_type
        if (
            request.method.upper() == POST
            and content_type is not None
            and content_type.startswith(WWW_FORM_URLENCODED)
        ):
            self.config.query_parser(self.get_post_data(request), handlers)

        self.parse_auth_header(request.get_header(AUTHORIZATION), oauth_kv_handler)

        logger.debug(
            "Parsed %d non-OAuth parameters and OAuth fields %s",
            len(kv_handler),
            sorted(oauth_params.to_dict()),
        )
        params = kv_handler.to_list(keep_duplicates=self.config.keep_duplicate_params)
        return params, oauth_params

    def parse_auth_header(
        self, header: Optional[str], oauth_kv_handler: KeyValueCallback
    ) -> None:
        """Feed the Authorization header, if it is an OAuth one, to ``oauth_kv_handler``."""
        if not header:
            return
        match = AUTH_HEADER_REGEX.match(header)
        if match is None:
            return
        auth_type, auth_string = match.group(1).lower(), match.group(2).strip()

        if auth_type in self.config.oauth2_auth_types:
            token = QuotedValueKeyValueHandler.unquote(auth_string)
            if not token or BEARER_TOKEN_INVALID.search(token):
                logger.debug("Ignoring malformed bearer credential")
                return
            parser: KeyValueParser = ConstKeyValueParser([(token, "")])
            handler: KeyValueCallback = OAuth2HeaderKeyValueHandler(oauth_kv_handler)
        elif auth_type in self.config.oauth1_auth_types:
            parser = self.config.header_parser
            handler = QuotedValueKeyValueHandler(oauth_kv_handler)
        else:
            logger.debug("Ignoring Authorization header with scheme %s", auth_type)
            return
        parser(auth_string, [handler])

    def get_post_data(self, request: HttpRequest) -> str:
        """Read the whole body, failing once it exceeds the declared length."""
        limit = request.content_length
        if limit is None or limit < 0:
            limit = 0
        chunks = []
        total = 0
        while True:
            chunk = request.read(self.config.body_chunk_size)
            if not chunk:
                break
            total += len(chunk)
            if total > limit:
                raise MalformedRequest(
                    "more bytes in input stream than content-length specified"
                )
            chunks.append(chunk)
        return b"".join(chunks).decode(_charset(request.content_type))
