"""Text normalisation helpers shared by the composer and test suites."""
from __future__ import annotations

import re

_INDENTED_LINE = re.compile(r"^([ \t]+)\S")
_WHITESPACE_RUN = re.compile(r"\s+")
_BLANK_LINE_RUN = re.compile(r"\n(?:[ \t]*\n){2,}")


def dedent(text: str) -> str:
    """Strip the common indentation of indented lines, then trim the result.

    Unlike :func:`textwrap.dedent`, lines with no leading whitespace (such as
    the first line of ``"SELECT 1\\n    FROM a"``) do not pin the common
    indentation to zero.
    """
    lines = text.split("\n")
    indents = [len(m.group(1)) for m in map(_INDENTED_LINE.match, lines) if m]
    if indents:
        width = min(indents)
        lines = [line[width:] if line[:1] in (" ", "\t") else line for line in lines]
    return "\n".join(lines).strip()


def collapse_blank_lines(text: str) -> str:
    """Collapse runs of two or more blank lines into a single blank line."""
    return _BLANK_LINE_RUN.sub("\n\n", text)


def canonicalize(sql: str) -> str:
    """Normalise SQL text so two statements can be compared ignoring layout.

    Each line is trimmed and its whitespace runs collapsed to one space;
    blank lines are dropped and the remaining lines joined with single
    spaces::

        >>> canonicalize("SELECT 1\\n\\n    FROM   a\\n")
        'SELECT 1 FROM a'

    Args:
        sql: Any SQL text.

    Returns:
        The canonical single-line form.
    """
    lines = (_WHITESPACE_RUN.sub(" ", line.strip()) for line in sql.split("\n"))
    return " ".join(line for line in lines if line)
