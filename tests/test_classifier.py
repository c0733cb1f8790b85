"""Tests for the keyword intent classifier."""

from __future__ import annotations

import pytest

from src.ai.classifier import classify, score
from src.ai.types import IntentCategory


class TestScore:
    def test_counts_distinct_keywords_only(self):
        scores = score("color, color y más color")
        assert scores.design == 1
        assert scores.logic == 0

    def test_matching_is_case_insensitive(self):
        scores = score("Revisa el DISEÑO de la PANTALLA")
        assert scores.design_matches == {"diseño", "pantalla"}

    def test_multiword_keyword(self):
        assert "base de datos" in score("migrar la base de datos").logic_matches


class TestClassify:
    def test_design_prompt(self):
        assert classify("mejorar la interfaz y la navegación") == IntentCategory.DESIGN

    def test_logic_prompt(self):
        assert classify("cómo calcular el depósito con un algoritmo") == IntentCategory.LOGIC

    def test_tie_is_mixed(self):
        prompt = "necesito ayuda con el color del botón y la validación del formulario"
        scores = score(prompt)
        assert scores.design >= 1
        assert scores.logic >= 1
        assert classify(prompt) == IntentCategory.MIXED

    @pytest.mark.parametrize("prompt", ["", "hola, buenos días"])
    def test_no_keywords_is_mixed(self, prompt):
        assert classify(prompt) == IntentCategory.MIXED

    def test_intent_values(self):
        assert IntentCategory.DESIGN.value == "ux-ui"
        assert IntentCategory("logic") is IntentCategory.LOGIC
