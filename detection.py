import logging
from typing import Dict, Optional, Sequence

from lingua import IsoCode639_1, Language, LanguageDetectorBuilder

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_RELATIVE_DISTANCE = 0.80


def language_for_code(code: str) -> Language:
    """Map an ISO 639-1 code like "de" to a lingua Language."""
    iso_code = getattr(IsoCode639_1, code.upper(), None)
    if iso_code is None:
        raise ValueError(f"Unknown ISO 639-1 language code: {code}")
    return Language.from_iso_code_639_1(iso_code)


def code_for_language(language: Language) -> str:
    return language.iso_code_639_1.name.lower()


class LanguageDetector:
    """lingua detector restricted to a fixed set of candidate languages."""

    def __init__(self, languages: Sequence[str], minimum_relative_distance: float = DEFAULT_MINIMUM_RELATIVE_DISTANCE):
        if not 0.0 <= minimum_relative_distance <= 0.99:
            raise ValueError(f"minimum_relative_distance must be between 0.0 and 0.99: {minimum_relative_distance}")
        self.languages = tuple(lang.lower() for lang in languages)
        if len(set(self.languages)) < 2:
            raise ValueError("At least two candidate languages are required")
        self.minimum_relative_distance = minimum_relative_distance

        candidates = [language_for_code(lang) for lang in self.languages]
        self._detector = (
            LanguageDetectorBuilder.from_languages(*candidates)
            .with_minimum_relative_distance(minimum_relative_distance)
            .build()
        )
        logger.info(f"LanguageDetector initialized (languages: {self.languages}, "
                    f"minimum relative distance: {minimum_relative_distance})")

    def compute_confidences(self, text: str) -> Dict[str, float]:
        """Confidence per candidate language, summing to 1.0 (all 0.0 when the text has no letters)."""
        return {
            code_for_language(confidence.language): confidence.value
            for confidence in self._detector.compute_language_confidence_values(text)
        }

    def detect_language_of(self, text: str) -> Optional[str]:
        """Return the ISO 639-1 code of the detected language, or None if there is no confident match."""
        language = self._detector.detect_language_of(text)
        if language is None:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"No confident match for '{text}': {self.compute_confidences(text)}")
            return None
        return code_for_language(language)
