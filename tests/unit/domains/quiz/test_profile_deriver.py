"""Tests for route derivation and body metrics."""

from __future__ import annotations

import math

import pytest

from facebloat.domains.quiz.domain_logic.models import ProfileState
from facebloat.domains.quiz.domain_logic.profile_deriver import (
    compute_bmi,
    compute_waist_to_height,
    derive_profile,
    derive_route,
)


class TestRoute:
    def test_menstruates_yes_is_female_with_no_metrics(self):
        derived = derive_profile(ProfileState(menstruates="yes"))
        assert derived.route == "female"
        assert derived.as_dict() == {"route": "female", "metrics": {}}

    @pytest.mark.parametrize("value", ["no", None, "", "Yes", "prefer not to say"])
    def test_anything_else_is_male(self, value):
        assert derive_route(ProfileState(menstruates=value)) == "male"

    def test_empty_profile(self):
        derived = derive_profile(ProfileState())
        assert derived.route == "male"
        assert derived.metrics.bmi is None
        assert derived.metrics.waist_to_height is None


class TestBMI:
    def test_metric_units(self):
        bmi = compute_bmi(ProfileState(height=170, weight=65, height_unit="cm", weight_unit="kg"))
        assert bmi == pytest.approx(65 / 1.7 ** 2)

    def test_units_default_to_metric(self):
        assert compute_bmi(ProfileState(height=180, weight=81)) == pytest.approx(25.0)

    def test_ft_and_lbs_two_step_conversion(self):
        profile = ProfileState(height=70, height_unit="ft", weight=150, weight_unit="lbs")
        height_m = 70 * 30.48 / 100
        expected = (150 * 0.453592) / (height_m * height_m)
        assert compute_bmi(profile) == pytest.approx(expected)
        assert derive_profile(profile).metrics.as_dict() == {"bmi": pytest.approx(expected)}

    @pytest.mark.parametrize(
        "height,weight",
        [(None, 70), (170, None), (0, 70), (170, 0)],
    )
    def test_missing_or_zero_input(self, height, weight):
        assert compute_bmi(ProfileState(height=height, weight=weight)) is None

    def test_nan_propagates(self):
        assert math.isnan(compute_bmi(ProfileState(height=170, weight=float("nan"))))


class TestWaistToHeight:
    def test_metric_units(self):
        ratio = compute_waist_to_height(ProfileState(waist=80, height=160))
        assert ratio == pytest.approx(0.5)

    def test_inches_waist(self):
        ratio = compute_waist_to_height(ProfileState(waist=32, waist_unit="in", height=170))
        assert ratio == pytest.approx(32 * 2.54 / 170)

    def test_ft_height_is_not_divided_by_100(self):
        ratio = compute_waist_to_height(ProfileState(waist=80, height=5.5, height_unit="ft"))
        assert ratio == pytest.approx(80 / (5.5 * 30.48))

    def test_missing_waist(self):
        assert compute_waist_to_height(ProfileState(height=170)) is None

    def test_zero_height(self):
        assert compute_waist_to_height(ProfileState(waist=80, height=0)) is None

    def test_both_metrics(self):
        derived = derive_profile(ProfileState(
            menstruates="no", height=200, weight=100, waist=100,
        ))
        assert derived.as_dict() == {
            "route": "male",
            "metrics": {"bmi": pytest.approx(25.0), "waistToHeight": pytest.approx(0.5)},
        }


class TestProfileStateLayout:
    def test_to_dict_uses_persisted_keys(self):
        profile = ProfileState(
            age="25-34", menstruates="yes", height=5.5, height_unit="ft",
            weight=130, weight_unit="lbs", waist=28, waist_unit="in", weight_change="stable",
        )
        assert profile.to_dict() == {
            "age": "25-34",
            "menstruates": "yes",
            "height": 5.5,
            "weight": 130,
            "heightUnit": "ft",
            "weightUnit": "lbs",
            "waist": 28,
            "waistUnit": "in",
            "weightChange": "stable",
        }

    def test_only_set_fields_emitted(self):
        assert ProfileState(menstruates="no").to_dict() == {"menstruates": "no"}

    def test_from_dict_round_trip(self):
        data = {"menstruates": "yes", "height": 170, "heightUnit": "cm", "weightChange": "gained"}
        profile = ProfileState.from_dict(data)
        assert profile.weight_change == "gained"
        assert profile.to_dict() == data

    def test_from_dict_ignores_unknown_keys(self):
        assert ProfileState.from_dict({"menstruates": "no", "shoeSize": 42}) == ProfileState(
            menstruates="no"
        )

    def test_from_dict_none(self):
        assert ProfileState.from_dict(None) == ProfileState()

    def test_from_dict_converts_numeric_strings(self):
        profile = ProfileState.from_dict({"height": "170", "weight": 65, "waist": "80.5"})
        assert profile.height == 170.0
        assert profile.weight == 65
        assert profile.waist == 80.5
        assert compute_bmi(profile) == pytest.approx(65 / 1.7 ** 2)

    def test_from_dict_empty_measurement_is_not_entered(self):
        assert ProfileState.from_dict({"height": "", "weight": None}) == ProfileState()

    @pytest.mark.parametrize("value", ["tall", True, [170], {"cm": 170}])
    def test_from_dict_rejects_non_numeric_measurement(self, value):
        with pytest.raises(ValueError, match="'height' must be a number"):
            ProfileState.from_dict({"height": value})
