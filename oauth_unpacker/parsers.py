"""Key/value parsers.

A parser splits a string into key/value pairs and feeds every pair to
each handler in order. Malformed segments are skipped, never reported.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, Tuple

from oauth_unpacker.handlers import KeyValueCallback

QUERY_DELIMITER = "&"
QUERY_KV_DELIMITER = "="
HEADER_DELIMITER = r"\s*,\s*"
HEADER_KV_DELIMITER = r"\s*=\s*"


class KeyValueParser(ABC):
    """Base class for key/value parsers."""

    @abstractmethod
    def parse(self, value: Optional[str], handlers: Sequence[KeyValueCallback]) -> None:
        """Feed every pair found in ``value`` to each of ``handlers``."""

    def __call__(self, value: Optional[str], handlers: Sequence[KeyValueCallback]) -> None:
        self.parse(value, handlers)


class ConstKeyValueParser(KeyValueParser):
    """Feeds a fixed list of pairs to the handlers, ignoring its input."""

    def __init__(self, pairs: Iterable[Tuple[str, str]]):
        self.pairs: List[Tuple[str, str]] = list(pairs)

    def parse(self, value: Optional[str], handlers: Sequence[KeyValueCallback]) -> None:
        for key, pair_value in self.pairs:
            for handler in handlers:
                handler(key, pair_value)


class StandardKeyValueParser(KeyValueParser):
    """Splits on regular-expression delimiters.

    Args:
        delimiter: Pattern separating pairs
        kv_delimiter: Pattern separating a key from its value

    A segment with one part is passed on as ``(key, "")``; a segment with
    more than two parts is dropped. Empty segments, as in ``a=1&&b=2``, are
    skipped rather than reported as an empty key.
    """

    def __init__(self, delimiter: str, kv_delimiter: str):
        self.delimiter = re.compile(delimiter)
        self.kv_delimiter = re.compile(kv_delimiter)

    def parse(self, value: Optional[str], handlers: Sequence[KeyValueCallback]) -> None:
        if not value:
            return
        for segment in self.delimiter.split(value):
            if not segment:
                continue
            parts = self.kv_delimiter.split(segment)
            if len(parts) == 2:
                key, pair_value = parts
            elif len(parts) == 1:
                key, pair_value = parts[0], ""
            else:
                continue
            for handler in handlers:
                handler(key, pair_value)

    def __repr__(self) -> str:
        return (
            f"StandardKeyValueParser({self.delimiter.pattern!r}, "
            f"{self.kv_delimiter.pattern!r})"
        )


def query_parser() -> StandardKeyValueParser:
    """Parser for query strings and form-encoded bodies."""
    return StandardKeyValueParser(re.escape(QUERY_DELIMITER), re.escape(QUERY_KV_DELIMITER))


def header_parser() -> StandardKeyValueParser:
    """Parser for the comma-separated parameter list of an Authorization header."""
    return StandardKeyValueParser(HEADER_DELIMITER, HEADER_KV_DELIMITER)
