from __future__ import annotations

LF = "\n"
CRLF = "\r\n"
BOM = "\ufeff"


def normalize_line_endings(text: str) -> str:
    """
    Convierte CRLF y CR sueltos a LF y elimina un BOM inicial.
    Todo el procesamiento posterior trabaja sólo con LF.
    """
    if not text:
        return ""
    if text.startswith(BOM):
        text = text[len(BOM):]
    return text.replace(CRLF, LF).replace("\r", LF)


def unfold(text: str) -> str:
    """
    Reverses content-line folding.

    A line starting with a space or horizontal tab continues the previous
    logical line: the terminator and that single whitespace character are
    removed. The first line is never treated as a continuation, which keeps
    the operation idempotent.
    """
    lines = normalize_line_endings(text).split(LF)
    out: list[str] = []
    for line in lines:
        if out and line[:1] in (" ", "\t"):
            out[-1] += line[1:]
        else:
            out.append(line)
    return LF.join(out)


def to_crlf(lines: list[str]) -> str:
    """Serializa líneas lógicas con el terminador CRLF exigido por iCalendar."""
    return "".join(line + CRLF for line in lines)
