"""Source preprocessing applied once before parsing."""

from __future__ import annotations

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

_SIMPLE_ESCAPES = {
    "\\": "\\",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def unescape(raw: str) -> str:
    """Decode backslash escapes in raw template text.

    Recognises ``\\\\``, ``\\n``, ``\\r``, ``\\t`` and ``\\xHH``. Anything else,
    including a trailing lone backslash or bad hex digits, is passed through
    unchanged with its backslash.

    Example:
        >>> unescape(r"a\\tb\\x41")
        'a\\tbA'
    """
    out: list[str] = []
    i = 0
    n = len(raw)

    while i < n:
        ch = raw[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue

        nxt = raw[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "x":
            # \x consumes up to two more characters whether or not they are hex
            digits = raw[i + 2 : i + 4]
            if len(digits) == 2 and all(d in _HEX_DIGITS for d in digits):
                out.append(chr(int(digits, 16)))
            else:
                out.append("\\x" + digits)
            i += 2 + len(digits)
        else:
            out.append("\\" + nxt)
            i += 2

    return "".join(out)


def _indent_width(line: str) -> int:
    width = 0
    for ch in line:
        if not ch.isspace():
            break
        width += 1
    return width


def unindent(raw: str) -> str:
    """Strip the common leading whitespace from every line.

    Whitespace-only lines do not count towards the common indent and are only
    trimmed if they are longer than it. Line breaks are preserved exactly.
    """
    lines = raw.split("\n")
    widths = [_indent_width(line) for line in lines if line.strip()]
    if not widths:
        return raw

    indent = min(widths)
    if indent == 0:
        return raw

    return "\n".join(line[indent:] if len(line) > indent else line for line in lines)
