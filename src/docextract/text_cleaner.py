from __future__ import annotations

import re
from pathlib import Path

_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_TOKEN = re.compile(r"(\s+)|(\S+)")
_NEWLINE = re.compile(r"[\r\n]")
_ALNUM = re.compile(r"[a-z0-9]", re.IGNORECASE)
_PUNCT = re.compile(r"[!-/:-@\[-`{-~]")
_REPEAT = re.compile(r"([^0-9])\1{2,}")
_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_ACRONYM = re.compile(r"^\(?[A-Z0-9.-]+('?s)?\)?[.,:]?$")
_ALL_ALPHA = re.compile(r"^[a-z]+$", re.IGNORECASE)
_CONSONANT = re.compile(r"(^y|[bcdfghjklmnpqrstvwxz])", re.IGNORECASE)
_VOWEL = re.compile(r"([aeiou]|y$)", re.IGNORECASE)
_CONSONANT_5 = re.compile(r"[bcdfghjklmnpqrstvwxyz]{5}", re.IGNORECASE)
_VOWEL_5 = re.compile(r"[aeiou]{5}", re.IGNORECASE)
_SINGLETON = re.compile(r"^[ai]$", re.IGNORECASE)
# Long runs of one-to-three character fragments.
_REPEATED = re.compile(r"(\b\S{1,2}\s+)(\S{1,3}\s+){5,}(\S{1,2}\s+)")


class TextCleaner:
    """
    Strip the garbage that OCR tends to leave behind.

    Works word by word: words that look like noise are dropped, and the
    whitespace around them is collapsed (line breaks survive). The result is a
    fixed point, so cleaning twice changes nothing.
    """

    MAX_WORD_LENGTH = 30

    def clean(self, text: str) -> str:
        result = _CONTROL.sub("", text)
        while True:
            again = self._clean_once(result)
            if again == result:
                return result
            result = again

    def clean_file(self, path: Path) -> None:
        path = Path(path)
        if not path.exists():
            return
        text = path.read_text(encoding="utf-8", errors="replace")
        path.write_text(self.clean(text), encoding="utf-8")

    def _clean_once(self, text: str) -> str:
        cleaned: list[str] = []
        spaced = False
        for m in _TOKEN.finditer(text):
            space, word = m.group(1), m.group(2)
            if space is not None:
                if not spaced or _NEWLINE.search(space):
                    cleaned.append(space)
                spaced = True
            elif not self.garbage(word):
                cleaned.append(word)
                spaced = False
        return _REPEATED.sub("", "".join(cleaned))

    def garbage(self, w: str) -> bool:
        acronym = _ACRONYM.match(w) is not None

        if len(w) > self.MAX_WORD_LENGTH:
            return True
        # Three or more identical (non-digit) characters in a row.
        if _REPEAT.search(w):
            return True
        if not acronym and len(_ALNUM.findall(w)) < len(_PUNCT.findall(w)):
            return True
        # Three or more different punctuation marks, ignoring the outer characters.
        if len(set(_PUNCT.findall(w[1:-1]))) >= 3:
            return True
        if _VOWEL_5.search(w) or _CONSONANT_5.search(w):
            return True
        if not acronym and len(_UPPER.findall(w)) > len(_LOWER.findall(w)):
            return True
        if len(w) == 1 and _ALL_ALPHA.match(w) and not _SINGLETON.match(w):
            return True
        if not acronym and len(w) > 2 and _ALL_ALPHA.match(w):
            vowels = len(_VOWEL.findall(w))
            consonants = len(_CONSONANT.findall(w))
            if vowels and consonants and (vowels // consonants >= 8 or consonants // vowels >= 8):
                return True
        return False
