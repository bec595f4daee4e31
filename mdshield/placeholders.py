# mdshield/placeholders.py
"""
Placeholder registry shared by every shielding preprocessor.

A shielded region is replaced by a token of the form::

    ==<CATEGORY>_<index>==

The delimiters are chosen so the markdown renderer passes the token through
untouched. No collision detection against the source text is performed; a
document that already contains text shaped like a token is assumed not to
exist.
"""

import re
from typing import Callable, Dict, List, Optional

TOKEN_DELIMITER = "=="


class UnresolvedToken(LookupError):
    """A placeholder in the text has no entry in the map it is restored from."""

    def __init__(self, token: str, message: Optional[str] = None):
        self.token = token
        super().__init__(message or f"no match restoring placeholder: {token}")


class UnknownToken(UnresolvedToken):
    """The registry was asked for a token it never allocated."""


def make_token(category: str, index: int) -> str:
    return f"{TOKEN_DELIMITER}{category}_{index}{TOKEN_DELIMITER}"


def token_pattern(category: str, prefix: str = "", suffix: str = "") -> "re.Pattern":
    """
    Compile a pattern matching tokens of one category.

    ``prefix`` and ``suffix`` are raw regex fragments, used to match wrapped
    forms such as ``<p>TOKEN</p>``. The bare token is exposed as the ``token``
    group and its number as the ``index`` group.
    """
    delimiter = re.escape(TOKEN_DELIMITER)
    return re.compile(
        f"{prefix}(?P<token>{delimiter}{re.escape(category)}_(?P<index>\\d+){delimiter}){suffix}"
    )


class PlaceholderRegistry:
    """
    Mints tokens and remembers what they stand for, for one shielding pass.

    A registry belongs to exactly one document. Preprocessors that run in the
    same pass may share it; they then share one counter, so a token number is
    never handed out twice.
    """

    def __init__(self, first_index: int = 0):
        self.first_index = first_index
        self._next_index = first_index
        self._payloads: Dict[str, str] = {}

    def allocate(self, category: str, payload: str) -> str:
        token = make_token(category, self._next_index)
        self._next_index += 1
        self._payloads[token] = payload
        return token

    def resolve(self, token: str) -> str:
        try:
            return self._payloads[token]
        except KeyError:
            raise UnknownToken(token) from None

    def as_dict(self) -> Dict[str, str]:
        return dict(self._payloads)

    def as_list(self) -> List[str]:
        # Insertion order is allocation order
        return list(self._payloads.values())

    def __len__(self) -> int:
        return len(self._payloads)

    def __contains__(self, token: object) -> bool:
        return token in self._payloads


def substitute_placeholders(
    pattern: "re.Pattern",
    text: str,
    lookup: Callable[["re.Match"], str],
    _ceiling: Optional[int] = None,
) -> str:
    """
    Replace every match of ``pattern`` in ``text`` with ``lookup(match)``.

    ``lookup`` raises ``UnresolvedToken`` for a token it cannot resolve; the
    error propagates on the first such token. Tokens that appear inside a
    restored payload are expanded as well, but only when their number is lower
    than the enclosing token's, since a payload can only contain tokens minted
    before it.
    """

    def _replace(match: "re.Match") -> str:
        index = int(match.group("index"))
        if _ceiling is not None and index >= _ceiling:
            return match.group(0)
        return substitute_placeholders(pattern, lookup(match), lookup, index)

    return pattern.sub(_replace, text)


def list_lookup(items: List[str]) -> Callable[["re.Match"], str]:
    """Build a lookup resolving the ``index`` group positionally in ``items``."""

    def _lookup(match: "re.Match") -> str:
        index = int(match.group("index"))
        if index >= len(items):
            raise UnresolvedToken(match.group("token"))
        return items[index]

    return _lookup


def positional_registry(registry: Optional[PlaceholderRegistry] = None) -> PlaceholderRegistry:
    """
    Return ``registry`` (or a fresh one) for extractors restored by list index.

    Raises:
        ValueError: ``registry`` does not number from 0, so its payload list
            would not line up with its token numbers
    """
    if registry is None:
        return PlaceholderRegistry()
    if registry.first_index != 0:
        raise ValueError(
            "positional placeholders need a registry numbering from 0, "
            f"got first_index={registry.first_index}"
        )
    return registry
