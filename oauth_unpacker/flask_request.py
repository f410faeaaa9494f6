"""Adapter from a Flask request to the HttpRequest accessor contract."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

from flask import Request

from oauth_unpacker.request import HttpRequest

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


class FlaskRequest(HttpRequest):
    """Wraps a ``flask.Request`` (or any Werkzeug request).

    Host name and port come from the Host header, falling back to the
    default port of the scheme. The body is read from the raw input
    stream, so ``request.form`` must not have been accessed before.
    """

    def __init__(self, request: Request):
        self._request = request
        split = urlsplit(f"//{request.host}")
        self._server_name = split.hostname or ""
        try:
            port = split.port
        except ValueError:
            logger.warning("Invalid port in Host header %r", request.host)
            port = None
        self._server_port = port or DEFAULT_PORTS.get(request.scheme.lower(), 80)

    @property
    def method(self) -> str:
        return self._request.method

    @property
    def scheme(self) -> str:
        return self._request.scheme

    @property
    def path(self) -> str:
        return self._request.path

    @property
    def server_name(self) -> str:
        return self._server_name

    @property
    def server_port(self) -> int:
        return self._server_port

    @property
    def query_string(self) -> Optional[str]:
        query = self._request.query_string
        if not query:
            return None
        return query.decode("utf-8", "replace")

    @property
    def content_type(self) -> Optional[str]:
        return self._request.content_type

    @property
    def content_length(self) -> Optional[int]:
        return self._request.content_length

    def get_header(self, name: str) -> Optional[str]:
        return self._request.headers.get(name)

    def read(self, size: int) -> bytes:
        return self._request.stream.read(size)
