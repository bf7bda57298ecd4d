"""Chat intent classifier.

Keyword substring matching in English, Finnish and Swedish. Rules are
evaluated in a fixed order and the first match wins:

    1. copy previous day
    2. show today
    3. show yesterday
    4. help
    5. hours query
    6. unknown

Footer color and banner text changes are never read from the user's text.
They are markers the language model writes into its reply, picked up by
``extract_ui_commands`` and stripped before the reply is shown.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class IntentKind(str, Enum):
    COPY_PREVIOUS_DAY = "copy_previous_day"
    SHOW_TODAY = "show_today"
    SHOW_YESTERDAY = "show_yesterday"
    CHANGE_FOOTER_COLOR = "change_footer_color"
    CHANGE_BANNER_TEXT = "change_banner_text"
    HOURS_QUERY = "hours_query"
    HELP = "help"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    argument: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class KeywordRule:
    """Matches when the text contains at least one keyword of every group."""

    groups: Tuple[Tuple[str, ...], ...]

    def matches(self, text: str) -> bool:
        return all(any(keyword in text for keyword in group) for group in self.groups)


def _any(*keywords: str) -> KeywordRule:
    return KeywordRule((keywords,))


def _all(*groups: Tuple[str, ...]) -> KeywordRule:
    return KeywordRule(tuple(groups))


LANGUAGES = ("en", "fi", "sv")

# Shared vocabularies
_COPY = {"en": ("copy", "same"), "fi": ("kopioi", "sama"), "sv": ("kopiera", "samma")}
_PREVIOUS_DAY = {
    "en": ("yesterday", "previous"),
    "fi": ("eilen", "eilis", "eilinen", "edellinen", "edellis"),
    "sv": ("igår", "i går", "föregående"),
}
_SHOW = {"en": ("show", "what"), "fi": ("näytä", "mitä"), "sv": ("visa", "vad")}
_TODAY = {"en": ("today",), "fi": ("tänään", "tämän päivän"), "sv": ("idag", "i dag")}
_YESTERDAY = {"en": ("yesterday",), "fi": ("eilen", "eilis"), "sv": ("igår", "i går")}

KEYWORDS: Dict[IntentKind, Dict[str, KeywordRule]] = {
    IntentKind.COPY_PREVIOUS_DAY: {
        lang: _all(_COPY[lang], _PREVIOUS_DAY[lang]) for lang in LANGUAGES
    },
    IntentKind.SHOW_TODAY: {
        lang: _all(_SHOW[lang], _TODAY[lang]) for lang in LANGUAGES
    },
    IntentKind.SHOW_YESTERDAY: {
        lang: _all(_SHOW[lang], _YESTERDAY[lang]) for lang in LANGUAGES
    },
    IntentKind.HELP: {
        "en": _any("help"),
        "fi": _any("auta", "apua"),
        "sv": _any("hjälp"),
    },
    IntentKind.HOURS_QUERY: {
        "en": _any(
            "hour", "time", "work time", "how many hours", "check hours",
            "view hours", "show my hours", "tell me hours",
        ),
        "fi": _any(
            "tunti", "tunnit", "tunteja", "tuntia", "aika", "työaika", "työtunnit",
            "näytä tunnit", "kerro tunnit", "paljonko tunteja", "montako tuntia",
        ),
        "sv": _any("timme", "timmar", "arbetstid", "visa mina timmar", "hur många timmar"),
    },
}

COLOR_CHANGE_KEYWORDS: Dict[str, KeywordRule] = {
    "en": _all(("change",), ("color", "colour")),
    "fi": _all(("muuta", "vaihda"), ("väri",)),
    "sv": _all(("ändra", "byt"), ("färg",)),
}

APP_INFO_KEYWORDS: Dict[str, KeywordRule] = {
    "en": _any("client", "project", "list", "show me"),
    "fi": _any("asiakas", "asiakkaat", "projekti", "näytä"),
    "sv": _any("kund", "projekt", "lista", "visa"),
}

# Evaluation order of the classifier
PRIORITY: Tuple[IntentKind, ...] = (
    IntentKind.COPY_PREVIOUS_DAY,
    IntentKind.SHOW_TODAY,
    IntentKind.SHOW_YESTERDAY,
    IntentKind.HELP,
    IntentKind.HOURS_QUERY,
)

FOOTER_COLOR_PATTERN = re.compile(r"changeFooterColor\(\s*['\"]?(bg-[a-z]+-[0-9]+)['\"]?\s*\)", re.IGNORECASE)
BANNER_TEXT_PATTERN = re.compile(r"changeBannerText\(\s*(['\"]?)(.*?)\1\s*\)", re.IGNORECASE | re.DOTALL)
ANY_MARKER_PATTERN = re.compile(r"change(?:FooterColor|BannerText)\([^)]*\)", re.IGNORECASE)


def _normalize(text: object) -> str:
    if not isinstance(text, str):
        return ""
    return " ".join(text.lower().split())


def _matching_language(rules: Dict[str, KeywordRule], text: str) -> Optional[str]:
    for lang in LANGUAGES:
        rule = rules.get(lang)
        if rule is not None and rule.matches(text):
            return lang
    return None


def classify_intent(text: object) -> Intent:
    """Classify a user message. Never raises; anything unrecognized is UNKNOWN."""
    normalized = _normalize(text)
    if not normalized:
        return Intent(IntentKind.UNKNOWN)

    for kind in PRIORITY:
        lang = _matching_language(KEYWORDS[kind], normalized)
        if lang is not None:
            return Intent(kind, language=lang)

    return Intent(IntentKind.UNKNOWN)


def is_color_change_request(text: object) -> bool:
    return _matching_language(COLOR_CHANGE_KEYWORDS, _normalize(text)) is not None


def is_app_info_query(text: object) -> bool:
    return _matching_language(APP_INFO_KEYWORDS, _normalize(text)) is not None


def is_hours_query(text: object) -> bool:
    return _matching_language(KEYWORDS[IntentKind.HOURS_QUERY], _normalize(text)) is not None


def extract_ui_commands(reply: str) -> Tuple[str, List[Intent]]:
    """
    Find UI markers in a language model reply.

    Returns the reply with every marker removed and the recognized commands
    in order of appearance. A malformed marker is stripped but yields no
    command.
    """
    if not reply:
        return "", []

    found = []
    for match in FOOTER_COLOR_PATTERN.finditer(reply):
        found.append((match.start(), Intent(IntentKind.CHANGE_FOOTER_COLOR, argument=match.group(1).lower())))
    for match in BANNER_TEXT_PATTERN.finditer(reply):
        banner = match.group(2).strip()
        if banner:
            found.append((match.start(), Intent(IntentKind.CHANGE_BANNER_TEXT, argument=banner)))

    cleaned = ANY_MARKER_PATTERN.sub("", reply)
    cleaned = re.sub(r"[ \t]{2,}", " ", cleaned).strip()
    return cleaned, [intent for _, intent in sorted(found, key=lambda item: item[0])]
