"""Keyword-based intent classifier.

Each prompt is scored against two fixed keyword sets: one for design / UX
concerns and one for business-logic concerns.  A score is the number of
*distinct* keywords found as case-insensitive substrings, so repeating a word
does not tip the balance.

    both scores zero        → MIXED
    design > logic          → DESIGN
    logic > design          → LOGIC
    equal and nonzero       → MIXED

The keyword lists are Spanish first (the product's working language) with a
handful of English equivalents.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.ai.types import IntentCategory

DESIGN_KEYWORDS: frozenset[str] = frozenset({
    "diseño",
    "interfaz",
    "usuario",
    "visual",
    "experiencia",
    "ux",
    "ui",
    "botón",
    "color",
    "layout",
    "navegación",
    "accesibilidad",
    "usabilidad",
    "responsive",
    "móvil",
    "flujo",
    "pantalla",
    "vista",
    "design",
    "interface",
    "button",
    "screen",
    "accessibility",
    "usability",
})

# "formulario" is scored here: form questions are treated as validation work.
LOGIC_KEYWORDS: frozenset[str] = frozenset({
    "calcular",
    "validar",
    "validación",
    "formulario",
    "proceso",
    "algoritmo",
    "función",
    "lógica",
    "base de datos",
    "api",
    "backend",
    "optimizar",
    "rendimiento",
    "datos",
    "consulta",
    "transacción",
    "integración",
    "calculate",
    "validate",
    "validation",
    "algorithm",
    "database",
    "performance",
    "business rule",
})


@dataclass(frozen=True)
class IntentScores:
    """Matched keywords for both categories."""

    design_matches: frozenset[str]
    logic_matches: frozenset[str]

    @property
    def design(self) -> int:
        return len(self.design_matches)

    @property
    def logic(self) -> int:
        return len(self.logic_matches)


def score(prompt: str) -> IntentScores:
    """Return the distinct design and logic keywords present in *prompt*."""
    text = prompt.lower()
    return IntentScores(
        design_matches=frozenset(kw for kw in DESIGN_KEYWORDS if kw in text),
        logic_matches=frozenset(kw for kw in LOGIC_KEYWORDS if kw in text),
    )


def classify(prompt: str) -> IntentCategory:
    """Map a free-text prompt to an intent category."""
    scores = score(prompt)
    if scores.design > scores.logic:
        return IntentCategory.DESIGN
    if scores.logic > scores.design:
        return IntentCategory.LOGIC
    # Tie, including the 0/0 case
    return IntentCategory.MIXED
