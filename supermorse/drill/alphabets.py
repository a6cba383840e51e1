"""
Morse Code Alphabets and Learning Orders.

Static lookup service for:
- Symbol-to-code tables (international, regional, prosigns, punctuation)
- Country-specific learning orders per curriculum stage

The scheduler only consumes ``MorseCurriculum.ordered_symbols``; the code
tables are used by the CLI for display and for decoding keyed input.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import Stage

# =============================================================================
# Code Tables
# =============================================================================

INTERNATIONAL_MORSE: dict[str, str] = {
    "A": ".-",
    "B": "-...",
    "C": "-.-.",
    "D": "-..",
    "E": ".",
    "F": "..-.",
    "G": "--.",
    "H": "....",
    "I": "..",
    "J": ".---",
    "K": "-.-",
    "L": ".-..",
    "M": "--",
    "N": "-.",
    "O": "---",
    "P": ".--.",
    "Q": "--.-",
    "R": ".-.",
    "S": "...",
    "T": "-",
    "U": "..-",
    "V": "...-",
    "W": ".--",
    "X": "-..-",
    "Y": "-.--",
    "Z": "--..",
    "0": "-----",
    "1": ".----",
    "2": "..---",
    "3": "...--",
    "4": "....-",
    "5": ".....",
    "6": "-....",
    "7": "--...",
    "8": "---..",
    "9": "----.",
}

REGIONAL_MORSE: dict[str, dict[str, str]] = {
    "norway": {"Æ": ".-.-", "Ø": "---.", "Å": ".--.-"},
    "sweden": {"Å": ".--.-", "Ä": ".-.-", "Ö": "---."},
    "germany": {"Ä": ".-.-", "Ö": "---.", "Ü": "..--", "ß": "...--.."},
    "france": {"É": "..-..", "È": ".-..-", "Ç": "-.-..", "À": ".--.-", "Ù": "..--"},
    "spain": {"Ñ": "--.--", "Á": ".--.-", "É": "..-..", "Í": "..", "Ó": "---", "Ú": "..--"},
    "denmark": {"Æ": ".-.-", "Ø": "---.", "Å": ".--.-"},
    "finland": {"Å": ".--.-", "Ä": ".-.-", "Ö": "---."},
    "iceland": {
        "Æ": ".-.-",
        "Ð": "..-.",  # Eth
        "Þ": ".--.",  # Thorn
        "Á": ".--.-",
        "É": "..-..",
        "Í": "..",
        "Ó": "---",
        "Ú": "..--",
        "Ý": "-.--",
        "Ö": "---.",
    },
    "faroe": {
        "Æ": ".-.-",
        "Ð": "..-.",
        "Ø": "---.",
        "Á": ".--.-",
        "Í": "..",
        "Ó": "---",
        "Ú": "..--",
        "Ý": "-.--",
    },
    "italy": {"È": ".-..-", "É": "..-..", "Ò": "---.", "Ç": "-.-..."},
    "poland": {
        "Ą": ".-.-",
        "Ć": "-.-..",
        "Ę": "..-..",
        "Ł": ".-..-",
        "Ń": "--.--",
        "Ó": "---.",
        "Ś": "...-...",
        "Ź": "--..-.",
        "Ż": "--..-",
    },
    "czech": {
        "Á": ".--.-",
        "Č": "-.-..",
        "Ď": "..-..",
        "É": "..-..",
        "Ě": "..-..",
        "Í": "..",
        "Ň": "--.--",
        "Ó": "---",
        "Ř": ".-..",
        "Š": "...-...",
        "Ť": "-.",
        "Ú": "..--",
        "Ů": "..--",
        "Ý": "-.--",
        "Ž": "--..",
    },
}

PROSIGNS: dict[str, str] = {
    "AR": ".-.-.",  # End of message
    "SK": "...-.-",  # End of contact
    "BT": "-...-",  # Break (new paragraph)
    "KN": "-.--.",  # Go ahead, specific station
}

SPECIAL_CHARACTERS: dict[str, str] = {
    ".": ".-.-.-",
    ",": "--..--",
    "?": "..--..",
    "!": "-.-.--",
    "/": "-..-.",
    "(": "-.--.",
    ")": "-.--.-",
    "&": ".-...",
    ":": "---...",
    ";": "-.-.-.",
    "=": "-...-",
    "+": ".-.-.",
    "-": "-....-",
    "_": "..--.-",
    '"': ".-..-.",
    "$": "...-..-",
    "@": ".--.-.",
    "'": ".----.",
}

# =============================================================================
# Learning Orders
# =============================================================================

INTERNATIONAL_CURRICULUM = "international"

# Frequency and distinctness first: K and M sound nothing alike.
CORE_LEARNING_ORDER: tuple[str, ...] = (
    "K", "M",
    "R", "S", "U", "A", "T",
    "O", "E", "I", "N", "D",
    "W", "G", "H", "J", "P",
    "B", "F", "L", "V", "X",
    "C", "Y", "Z", "Q",
    "5", "0",
    "9", "1", "2", "3", "4", "6", "7", "8",
)  # fmt: skip

REGIONAL_LEARNING_ORDER: dict[str, tuple[str, ...]] = {
    "norway": ("Æ", "Ø", "Å"),
    "sweden": ("Å", "Ä", "Ö"),
    "germany": ("Ä", "Ö", "Ü", "ß"),
    "france": ("É", "È", "Ç", "À", "Ù"),
    "spain": ("Ñ", "Á", "É", "Í", "Ó", "Ú"),
    "denmark": ("Æ", "Ø", "Å"),
    "finland": ("Å", "Ä", "Ö"),
    "iceland": ("Æ", "Ð", "Þ", "Á", "É", "Í", "Ó", "Ú", "Ý", "Ö"),
    "faroe": ("Æ", "Ð", "Ø", "Á", "Í", "Ó", "Ú", "Ý"),
    "italy": ("È", "É", "Ò", "Ç"),
    "poland": ("Ą", "Ć", "Ę", "Ł", "Ń", "Ó", "Ś", "Ź", "Ż"),
    "czech": ("Á", "Č", "Ď", "É", "Ě", "Í", "Ň", "Ó", "Ř", "Š", "Ť", "Ú", "Ů", "Ý", "Ž"),
}

PROSIGN_LEARNING_ORDER: tuple[str, ...] = ("AR", "SK", "BT", "KN")

SPECIAL_LEARNING_ORDER: tuple[str, ...] = (
    ".", ",", "?", "/",
    "!", ":", ";", "(", ")",
    "=", "+", "-", "@",
    "&", "_", '"', "$", "'",
)  # fmt: skip


# =============================================================================
# Curriculum Provider
# =============================================================================


class CurriculumProvider(Protocol):
    """Supplies the ordered symbols taught in each stage of a curriculum."""

    def ordered_symbols(self, curriculum_id: str, stage: Stage) -> Sequence[str]: ...

    def curriculum_ids(self) -> Sequence[str]: ...


class MorseCurriculum:
    """
    Built-in Morse curricula: international plus one per regional alphabet.

    Every curriculum shares the Core, Prosigns and Special orders; only the
    Regional stage differs. ``international`` has an empty Regional stage.
    """

    def ordered_symbols(self, curriculum_id: str, stage: Stage) -> Sequence[str]:
        """
        Get the learning order for a curriculum stage.

        Args:
            curriculum_id: ``international`` or a regional id such as ``norway``
            stage: The curriculum stage

        Returns:
            Symbols in recommended learning order (may be empty)
        """
        if stage is Stage.CORE:
            return CORE_LEARNING_ORDER
        if stage is Stage.REGIONAL:
            return REGIONAL_LEARNING_ORDER.get(curriculum_id, ())
        if stage is Stage.PROSIGNS:
            return PROSIGN_LEARNING_ORDER
        if stage is Stage.SPECIAL:
            return SPECIAL_LEARNING_ORDER
        return ()

    def curriculum_ids(self) -> Sequence[str]:
        return (INTERNATIONAL_CURRICULUM, *REGIONAL_LEARNING_ORDER)


# =============================================================================
# Lookups
# =============================================================================


def morse_alphabet(curriculum_id: str = INTERNATIONAL_CURRICULUM) -> dict[str, str]:
    """Letters and digits plus the curriculum's regional characters."""
    alphabet = dict(INTERNATIONAL_MORSE)
    alphabet.update(REGIONAL_MORSE.get(curriculum_id, {}))
    return alphabet


def curriculum_alphabet(curriculum_id: str = INTERNATIONAL_CURRICULUM) -> dict[str, str]:
    """Every symbol a learner of this curriculum can be taught, with its code."""
    alphabet = morse_alphabet(curriculum_id)
    alphabet.update(PROSIGNS)
    alphabet.update(SPECIAL_CHARACTERS)
    return alphabet


def complete_alphabet() -> dict[str, str]:
    """All known symbols from every table."""
    alphabet = {**INTERNATIONAL_MORSE, **PROSIGNS, **SPECIAL_CHARACTERS}
    for regional in REGIONAL_MORSE.values():
        alphabet.update(regional)
    return alphabet


def symbol_to_morse(symbol: str, curriculum_id: str | None = None) -> str:
    """
    Code for a symbol (case-insensitive), or ``""`` when unknown.

    Some regional letters differ between countries (Spanish Ó is ``---``,
    Polish Ó is ``---.``), so the curriculum's own alphabet is searched first.
    """
    tables = []
    if curriculum_id is not None:
        tables.append(curriculum_alphabet(curriculum_id))
    tables.append(complete_alphabet())
    for table in tables:
        # "ß".upper() is "SS", so try the symbol as given first.
        code = table.get(symbol) or table.get(symbol.upper())
        if code:
            return code
    return ""


def morse_to_symbol(code: str, curriculum_id: str | None = None) -> str:
    """
    Decode one code group.

    Several symbols share a code across tables (``.-.-`` is Æ, Ä and Ą), so
    the curriculum's own alphabet is searched first.

    Args:
        code: Dots and dashes, e.g. ``-.-``
        curriculum_id: Curriculum whose alphabet takes precedence

    Returns:
        The decoded symbol, or ``""`` when nothing matches
    """
    code = code.strip()
    if not code:
        return ""
    tables = []
    if curriculum_id is not None:
        tables.append(curriculum_alphabet(curriculum_id))
    tables.append(complete_alphabet())
    for table in tables:
        for symbol, symbol_code in table.items():
            if symbol_code == code:
                return symbol
    return ""


# =============================================================================
# Learner Input
# =============================================================================


def decode_keyed(code: str, expected: str | None = None, curriculum_id: str | None = None) -> str:
    """
    Decode a keyed code group for a drill position.

    Codes are not unique (``-...-`` is both BT and ``=``), so when the code
    is the expected symbol's code the expected symbol is returned.

    Args:
        code: Dots and dashes the learner keyed
        expected: Symbol that was asked for at this position
        curriculum_id: Curriculum whose alphabet takes precedence

    Returns:
        The decoded symbol, or ``""`` when nothing matches
    """
    code = code.strip()
    if expected is not None and code and code == symbol_to_morse(expected, curriculum_id):
        return expected
    return morse_to_symbol(code, curriculum_id)


def read_typed(token: str, expected: str | None = None, curriculum_id: str | None = None) -> str:
    """
    Normalize a typed symbol for a drill position.

    Matching is case-insensitive without upper-casing the input, which would
    turn ``ß`` into ``SS``.
    """
    token = token.strip()
    if expected is not None and token.lower() == expected.lower():
        return expected
    for symbol in curriculum_alphabet(curriculum_id or INTERNATIONAL_CURRICULUM):
        if symbol.lower() == token.lower():
            return symbol
    return token.upper() if len(token.upper()) == len(token) else token
