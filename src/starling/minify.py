"""Whitespace minification for fragment markup.

A ``data: fragments`` line must hold the whole fragment, so markup is
collapsed onto one line before it is encoded.  This is deliberately
conservative: it only touches whitespace and never parses the HTML.
"""

import re

_BETWEEN_TAGS = re.compile(r">\s+<")
_LINE_EDGES = re.compile(r"^\s+|\s+$", re.MULTILINE)
_WHITESPACE_RUN = re.compile(r"\s+")
_ATTRIBUTE = re.compile(r"""(\w+)\s*=\s*(["'])(.*?)\2""")


def minify_html(markup: str) -> str:
    """Collapse *markup* onto a single line.

    - whitespace between tags is removed
    - each line is trimmed
    - runs of whitespace become a single space
    - whitespace around ``=`` in quoted attributes is removed
    """
    markup = _BETWEEN_TAGS.sub("><", markup)
    markup = _LINE_EDGES.sub("", markup)
    markup = _WHITESPACE_RUN.sub(" ", markup)
    return _ATTRIBUTE.sub(r"\1=\2\3\2", markup)
