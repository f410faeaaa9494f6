"""Key/value handlers.

Handlers observe the (key, value) pairs produced by a key/value parser.
Each one does a single job (collect, filter, unwrap or adapt) and the
filtering ones forward to an inner handler. Any plain callable taking
``(key, value)`` can be used as an inner handler.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Tuple

from oauth_unpacker.params import OAUTH_TOKEN, OAuthParams, is_oauth_key

logger = logging.getLogger(__name__)

KeyValue = Tuple[str, str]
KeyValueCallback = Callable[[str, str], None]


def fold_last_wins(pairs: List[KeyValue]) -> List[KeyValue]:
    """Collapse repeated keys, keeping the last value at the first position.

    Args:
        pairs: Key/value pairs in arrival order

    Returns:
        One pair per key, ordered by first occurrence
    """
    folded: Dict[str, str] = {}
    for key, value in pairs:
        folded[key] = value
    return list(folded.items())


class KeyValueHandler(ABC):
    """Base class for handlers in the key/value chain."""

    @abstractmethod
    def handle(self, key: str, value: str) -> None:
        """Observe one key/value pair."""

    def __call__(self, key: str, value: str) -> None:
        self.handle(key, value)


class DuplicateKeyValueHandler(KeyValueHandler):
    """Collects every pair it sees, duplicates included."""

    def __init__(self):
        self._pairs: List[KeyValue] = []

    def handle(self, key: str, value: str) -> None:
        self._pairs.append((key, value))

    def to_list(self, keep_duplicates: bool = True) -> List[KeyValue]:
        """Return the collected pairs.

        Args:
            keep_duplicates: When False, repeated keys are folded so the
                last value wins (see ``fold_last_wins``)

        Returns:
            A new list of (key, value) tuples
        """
        if keep_duplicates:
            return list(self._pairs)
        return fold_last_wins(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)


class NotOAuthKeyValueHandler(KeyValueHandler):
    """Forwards only pairs outside the reserved ``oauth_`` namespace."""

    def __init__(self, inner: KeyValueCallback):
        self.inner = inner

    def handle(self, key: str, value: str) -> None:
        if not is_oauth_key(key):
            self.inner(key, value)


class OAuthKeyValueHandler(KeyValueHandler):
    """Writes recognized ``oauth_*`` pairs into an OAuthParams accumulator.

    Keys that are not OAuth protocol fields are ignored.
    """

    def __init__(self, oauth_params: OAuthParams):
        self.oauth_params = oauth_params

    def handle(self, key: str, value: str) -> None:
        if not self.oauth_params.set(key, value) and is_oauth_key(key):
            logger.debug("Ignoring unrecognized OAuth parameter %s", key)


class QuotedValueKeyValueHandler(KeyValueHandler):
    """Strips one pair of surrounding double quotes from the value."""

    def __init__(self, inner: KeyValueCallback):
        self.inner = inner

    @staticmethod
    def unquote(value: str) -> str:
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            return value[1:-1]
        return value

    def handle(self, key: str, value: str) -> None:
        self.inner(key, self.unquote(value))


class OAuth2HeaderKeyValueHandler(KeyValueHandler):
    """Turns an OAuth 2.0 header credential into an ``oauth_token`` pair.

    The bearer credential arrives as the key, outside the key=value grammar.
    """

    def __init__(self, inner: KeyValueCallback):
        self.inner = inner

    def handle(self, key: str, value: str) -> None:
        self.inner(OAUTH_TOKEN, key)
