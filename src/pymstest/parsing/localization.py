#
# src/pymstest/parsing/localization.py
#
"""
Runner tokens that differ between localized builds of mstest.exe.
"""
from collections.abc import Mapping
from types import MappingProxyType

import structlog
from attrs import define

log = structlog.get_logger("parsing.localization")

DEFAULT_LANGUAGE = "en"


@define(frozen=True, slots=True)
class LocalizedTokens:
    """The strings mstest.exe prints that the parser must recognise."""

    passed: str
    failed: str
    inconclusive: str
    final_results: str  # Sentinel that opens the summary after the result block.

    @property
    def outcomes(self) -> tuple[str, str, str]:
        """Outcome tokens in the order they are matched against a line."""
        return (self.passed, self.failed, self.inconclusive)


LOCALIZATION_TABLE: Mapping[str, LocalizedTokens] = MappingProxyType(
    {
        "en": LocalizedTokens(
            passed="Passed",
            failed="Failed",
            inconclusive="Inconclusive",
            final_results="Final Test Results:",
        ),
        "de": LocalizedTokens(
            passed="Bestanden",
            failed="Fehler",
            inconclusive="Nicht eindeutig",
            final_results="Endgültige Testergebnisse:",
        ),
        "fr": LocalizedTokens(
            passed="Réussite",
            failed="Échec",
            inconclusive="Non concluant",
            final_results="Résultats des tests finaux :",
        ),
        "es": LocalizedTokens(
            passed="Superado",
            failed="Error",
            inconclusive="No concluyente",
            final_results="Resultados finales de la prueba:",
        ),
        "it": LocalizedTokens(
            passed="Superato",
            failed="Non superato",
            inconclusive="Senza risultati",
            final_results="Risultati finali dei test:",
        ),
        "ja": LocalizedTokens(
            passed="成功",
            failed="失敗",
            inconclusive="結果不確定",
            final_results="最終テスト結果:",
        ),
    }
)


def get_tokens(language: str | None) -> LocalizedTokens:
    """
    Returns the token set for a language code.

    Matching is case-insensitive, and a regional code such as ``de-DE`` falls
    back to ``de``. Anything unknown silently falls back to English.
    """
    code = (language or DEFAULT_LANGUAGE).strip().lower().replace("_", "-")
    tokens = LOCALIZATION_TABLE.get(code)
    if tokens is None:
        tokens = LOCALIZATION_TABLE.get(code.split("-", 1)[0])
    if tokens is None:
        log.debug("Unknown language, using default", language=language, default=DEFAULT_LANGUAGE)
        tokens = LOCALIZATION_TABLE[DEFAULT_LANGUAGE]
    return tokens

# 🔼⚙️
