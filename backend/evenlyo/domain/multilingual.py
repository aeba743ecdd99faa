"""
Bilingual text value object.

Request payloads may carry free text either as a plain string or as an
``{"en": ..., "nl": ...}`` object. Both shapes are normalized here, once, at
the HTTP boundary; the rest of the code only ever sees ``MultilingualText``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from ..core.constants import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES


class MultilingualText(BaseModel):
    """Immutable text in every supported language."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    en: str
    nl: str

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, MultilingualText):
            return value.model_dump()
        if isinstance(value, str):
            text = value.strip()
            if not text:
                raise ValueError("text must not be empty")
            # Same value for Dutch until a translation is supplied
            return {lang: text for lang in SUPPORTED_LANGUAGES}
        if isinstance(value, dict):
            cleaned = {
                lang: str(value[lang]).strip()
                for lang in SUPPORTED_LANGUAGES
                if value.get(lang) is not None and str(value[lang]).strip()
            }
            unknown = set(value) - set(SUPPORTED_LANGUAGES)
            if unknown:
                raise ValueError(f"unsupported language keys: {sorted(unknown)}")
            if not cleaned:
                raise ValueError("text must contain at least one language")
            fallback = cleaned.get(DEFAULT_LANGUAGE) or next(iter(cleaned.values()))
            return {lang: cleaned.get(lang, fallback) for lang in SUPPORTED_LANGUAGES}
        return value

    @classmethod
    def of(cls, value: Any) -> "MultilingualText":
        return cls.model_validate(value)

    @classmethod
    def optional(cls, value: Any) -> Optional["MultilingualText"]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return cls.of(value)

    @classmethod
    def pair(cls, en: str, nl: str) -> "MultilingualText":
        return cls(en=en, nl=nl)

    def get(self, lang: str = DEFAULT_LANGUAGE) -> str:
        return getattr(self, lang, self.en)

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump()

    def shortest_length(self) -> int:
        return min(len(self.en), len(self.nl))

    def __str__(self) -> str:
        return self.en
