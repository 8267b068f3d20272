"""Field normalisation: prices, counts, status, dates, times, categories."""

from __future__ import annotations

import math

import pytest

from salon_dash.data.normalize import (
    as_text,
    categorize_service,
    normalize_date,
    normalize_price,
    normalize_status,
    normalize_time,
    parse_count,
)
from salon_dash.data.schemas import ServiceCategory


class TestNormalizePrice:
    @pytest.mark.parametrize("raw, expected", [
        ("€1.234,50", 1234.5),
        ("2k", 2000.0),
        ("2,5K", 2500.0),
        ("25 EUR", 25.0),
        ("$ 40", 40.0),
        ("15", 15.0),
        ("12,5", 12.5),
        ("30€ aprox", 30.0),
    ])
    def test_spreadsheet_formats(self, raw, expected):
        assert normalize_price(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", None, float("nan"), "gratis", "-", "-5"])
    def test_unusable_is_zero(self, raw):
        assert normalize_price(raw) == 0.0

    def test_never_nan_or_negative(self):
        for raw in ["abc", "k", "€", "1e999", "-3k"]:
            value = normalize_price(raw)
            assert math.isfinite(value)
            assert value >= 0


class TestParseCount:
    def test_leading_integer(self):
        assert parse_count("12") == 12
        assert parse_count(" 7 citas") == 7

    def test_unusable_is_zero(self):
        assert parse_count("") == 0
        assert parse_count("n/a") == 0
        assert parse_count("-4") == 0


class TestNormalizeStatus:
    def test_trimmed_and_lowered(self):
        assert normalize_status("  Confirmada ") == "confirmada"

    def test_empty_is_unknown(self):
        assert normalize_status("") == "desconocido"
        assert normalize_status("   ") == "desconocido"
        assert normalize_status(None) == "desconocido"


class TestNormalizeDate:
    def test_iso_is_identity(self):
        assert normalize_date("2025-03-14") == "2025-03-14"

    def test_surrounding_whitespace(self):
        assert normalize_date(" 2025-03-14 ") == "2025-03-14"

    def test_other_readable_formats(self):
        assert normalize_date("March 14, 2025") == "2025-03-14"
        assert normalize_date("2025/03/14") == "2025-03-14"

    def test_unreadable_passes_through(self):
        assert normalize_date("mañana") == "mañana"

    @pytest.mark.parametrize("word", ["now", "today", "Today", "tomorrow"])
    def test_relative_words_pass_through(self, word):
        assert normalize_date(word) == word

    def test_empty(self):
        assert normalize_date("") == ""
        assert normalize_date(None) == ""


class TestNormalizeTime:
    def test_range_keeps_start(self):
        assert normalize_time("10:00-11:00") == "10:00"

    def test_embedded(self):
        assert normalize_time("a las 9:30h") == "9:30"

    def test_no_time_passes_through(self):
        assert normalize_time("sin hora") == "sin hora"

    def test_empty(self):
        assert normalize_time("") == ""
        assert normalize_time(None) == ""


class TestCategorizeService:
    @pytest.mark.parametrize("text, expected", [
        ("Corte de barba", ServiceCategory.CUT_AND_BEARD),
        ("CORTE + AFEITADO", ServiceCategory.CUT_AND_BEARD),
        ("Corte de pelo", ServiceCategory.CUT),
        ("Arreglo de barba", ServiceCategory.SHAVE),
        ("Afeitado clásico", ServiceCategory.SHAVE),
        ("Tinte", ServiceCategory.DYE),
        ("Color completo", ServiceCategory.DYE),
        ("Peinado", ServiceCategory.OTHER),
        ("", ServiceCategory.OTHER),
        (None, ServiceCategory.OTHER),
    ])
    def test_categories(self, text, expected):
        assert categorize_service(text) is expected

    def test_labels(self):
        assert ServiceCategory.CUT_AND_BEARD.value == "Corte+Barba"
        assert ServiceCategory.OTHER.value == "Otros"


def test_as_text():
    assert as_text(None) == ""
    assert as_text(float("nan")) == ""
    assert as_text(12) == "12"
