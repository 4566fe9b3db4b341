r"""Immutable Unicode text with a canonical UTF-8 form.

    >>> from utf8string import EncodedText
    >>> t = EncodedText.from_utf32([0x1F600])
    >>> t.get_utf16()
    (55357, 56832)
    >>> t.get_utf8()
    b'\xf0\x9f\x98\x80'
"""

from utf8string.errors import MalformedInputError, Violation
from utf8string.outcome import Outcome
from utf8string.text import EncodedText

__all__ = ["EncodedText", "MalformedInputError", "Outcome", "Violation"]
__version__ = "0.1.0"
