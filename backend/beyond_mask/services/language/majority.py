"""Majority-vote script classifier over Hebrew and Latin letters."""

from beyond_mask.services.language.base import BaseScriptClassifier, ScriptTag


def _is_hebrew(ch: str) -> bool:
    code = ord(ch)
    return 0x0590 <= code <= 0x05FF or 0xFB1D <= code <= 0xFB4F


def _is_latin(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


class MajorityScriptClassifier(BaseScriptClassifier):
    """Counts letters of each supported script; the larger count wins.

    Ties go to Hebrew, since a mixed message with any Hebrew in it is far more
    likely to come from a Hebrew speaker quoting an English term than the
    reverse. Digits, punctuation and other scripts are ignored.
    """

    def classify(self, text: str) -> ScriptTag | None:
        hebrew = latin = 0
        for ch in text:
            if _is_hebrew(ch):
                hebrew += 1
            elif _is_latin(ch):
                latin += 1

        if hebrew == 0 and latin == 0:
            return None
        if hebrew >= latin:
            return ScriptTag.HEBREW
        return ScriptTag.LATIN
