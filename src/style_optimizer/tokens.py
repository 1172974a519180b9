"""Estimate how many characters of a stylesheet survive minification."""

from __future__ import annotations

_WHITESPACE = {" ", "\n", "\t", "\r", "\f"}
_STRING_QUOTES = {"'", '"'}


def compute_css_token_length(content: str) -> int:
    """Return the estimated minified length of *content*.

    Whitespace outside strings and ``/* */`` comments are dropped. License
    comments (``/*! ... */``) and string literals are kept whole; an escape
    inside a string counts as two characters. Unterminated comments or
    strings make the estimate fall back to ``len(content)``.
    """
    total = 0
    in_comment = False
    in_license_comment = False
    in_string = False
    quote = ""

    i = 0
    length = len(content)
    while i < length:
        char = content[i]
        pair = content[i : i + 2]

        if in_comment:
            if in_license_comment:
                total += 1
            if pair == "*/":
                if in_license_comment:
                    total += 1
                in_comment = False
                i += 1
        elif in_string:
            total += 1
            if char == "\\":
                total += 1
                i += 1
            elif char == quote:
                in_string = False
        elif pair == "/*":
            in_comment = True
            in_license_comment = content[i + 2 : i + 3] == "!"
            if in_license_comment:
                total += 2
            i += 1
        elif char in _STRING_QUOTES:
            in_string = True
            quote = char
            total += 1
        elif char not in _WHITESPACE:
            total += 1
        i += 1

    if in_comment or in_string:
        return length
    return total
