"""
Bilingual text values and their resolution.

A localized value is either a single-language string or a Hebrew/English
pair. Resolution never fails: it walks requested locale -> English ->
empty string.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Union

SUPPORTED_LOCALES = ("he", "en")
DEFAULT_LOCALE = "he"
FALLBACK_LOCALE = "en"


@dataclass(frozen=True)
class SingleLanguage:
    """Text that is shown as-is regardless of locale."""
    text: str


@dataclass(frozen=True)
class Bilingual:
    """Text available in Hebrew and English."""
    he: str = ""
    en: str = ""

    def for_locale(self, locale: str) -> str:
        return self.he if locale == "he" else self.en


LocalizedText = Union[SingleLanguage, Bilingual]


def normalize_locale(locale: str | None) -> str:
    """Map any locale string onto a supported one (unknown -> English)."""
    if locale in SUPPORTED_LOCALES:
        return locale
    return FALLBACK_LOCALE


def localized(value: Any) -> LocalizedText | None:
    """
    Build a LocalizedText from raw config data.

    Accepts a plain string, a ``{"he": ..., "en": ...}`` mapping, an existing
    LocalizedText or None.
    """
    if value is None or isinstance(value, (SingleLanguage, Bilingual)):
        return value
    if isinstance(value, str):
        return SingleLanguage(value)
    if isinstance(value, Mapping):
        unknown = set(value) - set(SUPPORTED_LOCALES)
        if unknown:
            raise ValueError(f"Unsupported locale key(s) in localized text: {sorted(unknown)}")
        return Bilingual(he=str(value.get("he") or ""), en=str(value.get("en") or ""))
    raise TypeError(f"Cannot build localized text from {type(value).__name__}")


def resolve_localized(value: LocalizedText | None, locale: str | None = DEFAULT_LOCALE) -> str:
    """
    Resolve a localized value to a display string.

    Args:
        value: Single-language or bilingual text (None resolves to "")
        locale: Requested locale; anything other than "he"/"en" is treated as "en"

    Returns:
        The text in the requested language, else the English text, else "".
    """
    if value is None:
        return ""
    if isinstance(value, SingleLanguage):
        return value.text

    primary = normalize_locale(locale)
    return value.for_locale(primary) or value.for_locale(FALLBACK_LOCALE) or ""
