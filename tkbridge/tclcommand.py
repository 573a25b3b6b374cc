"""Build Tcl scripts out of words instead of formatting strings together.

Example::

    >>> str(Command("bind", ".foo", "<Button-1>", "puts {hello world}"))
    'bind .foo <Button-1> {puts {hello world}}'
    >>> str(Command("image", "create", "photo", "img1").option("file", "a b.png"))
    'image create photo img1 -file {a b.png}'
"""
from __future__ import annotations

import re
from typing import Iterable

# see Tcl(n) for the rules
_SPECIAL_CHARS = re.compile(r'[\s{}\[\]$";\\]')
_BACKSLASH_ESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r", "\f": "\\f", "\v": "\\v"}


def _braces_are_balanced(string: str) -> bool:
    depth = 0
    for char in string:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def quote(word: object) -> str:
    """Convert any value to a string that Tcl parses as exactly one word.

    Braces are used when possible, because that's what Tcl itself does
    when it creates lists:

        >>> quote("hello")
        'hello'
        >>> quote("hello world")
        '{hello world}'
        >>> quote("")
        '{}'
        >>> quote("}{")
        '\\\\}\\\\{'
    """
    string = str(word)
    if not string:
        return "{}"
    if _SPECIAL_CHARS.search(string) is None and not string.startswith("#"):
        return string
    if "\\" not in string and _braces_are_balanced(string):
        return "{" + string + "}"
    return "".join(
        _BACKSLASH_ESCAPES.get(char, "\\" + char if _SPECIAL_CHARS.match(char) else char)
        for char in string
    )


class Raw:
    """A piece of Tcl code that goes to the script as is, without quoting.

    Use this for command substitutions like ``Raw("[focus]")``.
    """

    def __init__(self, code: str) -> None:
        self.code = code

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Raw({self.code!r})"


class Command:
    """An ordered list of words that renders to one line of Tcl code."""

    def __init__(self, *words: object) -> None:
        self.words: list[object] = list(words)

    def append(self, word: object) -> Command:
        self.words.append(word)
        return self

    def extend(self, words: Iterable[object]) -> Command:
        self.words.extend(words)
        return self

    def option(self, name: str, value: object) -> Command:
        """Add ``-name value``."""
        self.words.append("-" + name)
        self.words.append(value)
        return self

    def __str__(self) -> str:
        return " ".join(
            word.code if isinstance(word, Raw) else quote(word) for word in self.words
        )

    def __repr__(self) -> str:
        return f"<Command: {self}>"
