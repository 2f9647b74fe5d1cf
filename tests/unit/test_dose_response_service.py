"""Unit tests for portion size vs. severity regression."""

import logging

import pytest

from app.services.analysis_schemas import DoseResponseConfidence, PortionSeverityPair
from app.services.dose_response_service import (
    classify_dose_response,
    compute_dose_response,
    normalize_portion_size,
)


def _pairs(portions, severities):
    return [PortionSeverityPair(portion=p, severity=s) for p, s in zip(portions, severities)]


class TestComputeDoseResponse:
    """Tests for compute_dose_response."""

    def test_increasing_severity(self):
        result = compute_dose_response(_pairs([1, 1, 2, 2, 3, 3], [2, 3, 5, 6, 8, 9]))

        assert result.confidence == DoseResponseConfidence.HIGH
        assert result.slope == pytest.approx(3.0)
        assert result.intercept == pytest.approx(-0.5)
        assert result.r2 == pytest.approx(0.96)
        assert result.r2 > 0.9
        assert result.sample_size == 6
        assert "Larger portions correlate with more severe symptoms" in result.message
        assert "+3.00" in result.message
        assert "R² = 0.96" in result.message
        assert "Based on 6 observations" in result.message

    def test_decreasing_severity(self):
        result = compute_dose_response(_pairs([1, 1, 2, 2, 3, 3], [9, 8, 6, 5, 3, 2]))

        assert result.slope < 0
        assert "less severe symptoms" in result.message

    def test_no_relationship(self):
        result = compute_dose_response(_pairs([1, 2, 3, 1, 2, 3], [5, 5, 5, 5, 5, 5]))

        assert result.slope == 0.0
        assert result.message.startswith("No clear dose-response relationship detected")

    def test_insufficient_data(self):
        result = compute_dose_response(_pairs([1, 2, 3], [2, 5, 8]))

        assert result.confidence == DoseResponseConfidence.INSUFFICIENT
        assert (result.slope, result.intercept, result.r2) == (0.0, 0.0, 0.0)
        assert result.sample_size == 3
        assert "minimum 5 events required (found 3)" in result.message

    def test_pairs_returned(self):
        pairs = _pairs([1, 2, 3, 1, 2], [2, 4, 6, 3, 4])

        assert compute_dose_response(pairs).portion_severity_pairs == pairs


class TestClassifyDoseResponse:
    """Tests for the r2 confidence bands."""

    @pytest.mark.parametrize(
        "r2,expected",
        [
            (0.7, DoseResponseConfidence.HIGH),
            (0.69, DoseResponseConfidence.MEDIUM),
            (0.4, DoseResponseConfidence.MEDIUM),
            (0.39, DoseResponseConfidence.LOW),
            (0.0, DoseResponseConfidence.LOW),
        ],
    )
    def test_bands(self, r2, expected):
        assert classify_dose_response(r2, 5) == expected

    def test_small_sample(self):
        assert classify_dose_response(0.99, 4) == DoseResponseConfidence.INSUFFICIENT


class TestNormalizePortionSize:
    """Tests for portion label normalization."""

    @pytest.mark.parametrize(
        "label,expected", [("small", 1), ("medium", 2), ("large", 3), (" Large ", 3)]
    )
    def test_known_labels(self, label, expected):
        assert normalize_portion_size(label) == expected

    def test_unknown_label_defaults_to_medium(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert normalize_portion_size("huge") == 2

        assert "Unknown portion size" in caplog.text
