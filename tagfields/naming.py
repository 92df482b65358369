"""Identifier helpers used by name derivation and lookup.

Examples:
    >>> camel_split("UserID")
    'user_id'
    >>> camel_split("HTTPServer", "-")
    'http-server'
    >>> camel_split("Café")
    'café'
    >>> capitalize("user")
    'User'
"""

from __future__ import annotations


def _words(name: str) -> list[str]:
    """Split on non-alphanumerics and on case changes.

    An upper-case letter starts a new word after a lower-case letter or
    digit, and ends an upper-case run (acronym) when a lower-case letter
    follows it. Letters without case, as in most non-Latin scripts, never
    split a word.
    """
    words: list[str] = []
    current: list[str] = []
    for i, ch in enumerate(name):
        if not ch.isalnum():
            if current:
                words.append("".join(current))
                current = []
            continue
        if ch.isupper() and current:
            following = name[i + 1] if i + 1 < len(name) else ""
            if not current[-1].isupper() or following.islower():
                words.append("".join(current))
                current = []
        current.append(ch)
    if current:
        words.append("".join(current))
    return words


def camel_split(name: str, sep: str = "_") -> str:
    """Split a CamelCase or snake_case identifier into lower-case words.

    Existing separators (``_``, ``-``, spaces) are word boundaries too, so
    snake_case input is returned unchanged.
    """
    return sep.join(word.lower() for word in _words(name))


def capitalize(name: str) -> str:
    """Upper-case the first character only."""
    if not name:
        return name
    return name[0].upper() + name[1:]


def is_exported(name: str) -> bool:
    """Fields whose name starts with an underscore are private."""
    return bool(name) and not name.startswith("_")
