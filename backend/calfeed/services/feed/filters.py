from __future__ import annotations

from typing import Iterable


class FilterRule:
    """
    Conjunto de frases bloqueadas (literal, case-insensitive).

    Una entrada se excluye si cualquiera de las frases aparece en cualquier
    parte de su texto, no sólo en el SUMMARY.
    """

    def __init__(self, phrases: Iterable[str] = ()):
        seen: dict[str, str] = {}
        for phrase in phrases:
            phrase = (phrase or "").strip()
            if phrase:
                seen.setdefault(phrase.casefold(), phrase)
        self._phrases = seen

    @property
    def phrases(self) -> list[str]:
        return list(self._phrases.values())

    def __bool__(self) -> bool:
        return bool(self._phrases)

    def __len__(self) -> int:
        return len(self._phrases)

    def matches(self, text: str) -> str | None:
        """Returns the first configured phrase found in `text`, or None."""
        haystack = (text or "").casefold()
        for folded, phrase in self._phrases.items():
            if folded in haystack:
                return phrase
        return None

    def __repr__(self) -> str:
        return f"FilterRule({self.phrases!r})"
