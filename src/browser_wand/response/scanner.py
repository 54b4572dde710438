"""Balanced-span scanning for JSON-like text.

A single depth/quote state machine shared by the response parser (finding the
end of the outermost object or array) and truncation repair (pulling complete
objects out of a cut-off array).
"""

from __future__ import annotations

from collections.abc import Iterator
import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class BalancedScanner:
    """Find balanced `open_char ... close_char` spans, ignoring quoted text.

    A quote toggles the in-string state unless it is preceded by an odd number
    of escape characters. Nothing inside a string affects the depth.
    """

    open_char: str = "{"
    close_char: str = "}"
    quote: str = '"'
    escape: str = "\\"

    def find_close(self, text: str, start: int) -> int | None:
        """Return the index of the character closing the span opened at `start`.

        Returns None when `text[start]` is not `open_char` or the span never
        closes (the text was cut off mid-structure).
        """
        if start < 0 or start >= len(text) or text[start] != self.open_char:
            return None

        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == self.escape:
                    escaped = True
                elif ch == self.quote:
                    in_string = False
                continue
            if ch == self.quote:
                in_string = True
            elif ch == self.open_char:
                depth += 1
            elif ch == self.close_char:
                depth -= 1
                if depth == 0:
                    return i
        return None

    def span(self, text: str, start: int) -> str | None:
        """Return the balanced substring starting at `start`, if it closes."""
        end = self.find_close(text, start)
        if end is None:
            return None
        return text[start : end + 1]

    def depths(self, text: str) -> list[int | None]:
        """Nesting depth at each index of `text`, or None inside a string.

        An opening quote reports the depth it appears at; the characters it
        encloses, including the closing quote, report None.
        """
        result: list[int | None] = []
        depth = 0
        in_string = False
        escaped = False
        for ch in text:
            if in_string:
                result.append(None)
                if escaped:
                    escaped = False
                elif ch == self.escape:
                    escaped = True
                elif ch == self.quote:
                    in_string = False
                continue
            result.append(depth)
            if ch == self.quote:
                in_string = True
            elif ch == self.open_char:
                depth += 1
            elif ch == self.close_char:
                depth -= 1
        return result

    def iter_spans(
        self, text: str, start: int = 0, *, stop_char: str | None = None
    ) -> Iterator[str]:
        """Yield every complete top-level span found from `start` onward.

        Scanning stops at the first unclosed span, or at `stop_char` when it
        appears outside of a string and outside of any span (e.g. the `]` that
        ends the array holding the spans).
        """
        i = start
        in_string = False
        escaped = False
        while i < len(text):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == self.escape:
                    escaped = True
                elif ch == self.quote:
                    in_string = False
                i += 1
                continue
            if ch == self.quote:
                in_string = True
            elif ch == self.open_char:
                end = self.find_close(text, i)
                if end is None:
                    return
                yield text[i : end + 1]
                i = end + 1
                continue
            elif stop_char is not None and ch == stop_char:
                return
            i += 1


def find_string_end(text: str, start: int, quote: str = '"', escape: str = "\\") -> int | None:
    """Return the index of the quote closing the string literal opened at `start`."""
    if start >= len(text) or text[start] != quote:
        return None
    escaped = False
    for i in range(start + 1, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
        elif ch == escape:
            escaped = True
        elif ch == quote:
            return i
    return None


OBJECT_SCANNER = BalancedScanner("{", "}")
ARRAY_SCANNER = BalancedScanner("[", "]")


def scanner_for(open_char: str) -> BalancedScanner:
    """Return the shared scanner for an opening character."""
    return ARRAY_SCANNER if open_char == "[" else OBJECT_SCANNER
