"""Digit recovery for OCR output with visually confusable characters.

Tesseract regularly reads digits on this screen as look-alike letters
or symbols. The rules below rewrite them back, in order:

1. A separator sandwiched between two digits is junk and is dropped,
   so ``"3/7"`` becomes ``"37"`` rather than ``"317"``. This must run
   before the single-character pass, which maps ``/`` to ``1``.
2. Each confusable character is replaced by the digit it denotes.
3. Anything left that is not a digit is removed.
"""

import re

_SANDWICH = re.compile(r"(?<=\d)[/|\\](?=\d)")

CONFUSABLES: dict[str, str] = {
    "O": "0",
    "o": "0",
    "Q": "0",
    "D": "0",
    "I": "1",
    "i": "1",
    "l": "1",
    "|": "1",
    "!": "1",
    "/": "1",
    "\\": "1",
    "[": "1",
    "]": "1",
    "Z": "2",
    "z": "2",
    "S": "5",
    "s": "5",
    "G": "6",
    "b": "6",
    "T": "7",
    "B": "8",
    "g": "9",
    "q": "9",
}

_TRANSLATION = str.maketrans(CONFUSABLES)
_NON_DIGIT = re.compile(r"\D")

# Regex character class body: digits plus every confusable.
DIGITISH = "0-9" + re.escape("".join(CONFUSABLES))


def clean_digits(text: str) -> str:
    """Rewrite confusable characters to digits and drop everything else.

    A string made only of digits is returned unchanged.
    """
    text = _SANDWICH.sub("", text)
    text = text.translate(_TRANSLATION)
    return _NON_DIGIT.sub("", text)


def has_real_digit(text: str) -> bool:
    return any(ch.isdigit() for ch in text)


def parse_confusable_int(text: str) -> int | None:
    """Parse an integer from OCR text after confusion cleaning.

    Blobs without at least one genuine digit are refused, so that
    ordinary words such as ``"Gible"`` never read as numbers.

    Returns:
        The parsed integer, or ``None`` if nothing numeric remains.
    """
    if not has_real_digit(text):
        return None
    digits = clean_digits(text)
    if not digits:
        return None
    return int(digits)
