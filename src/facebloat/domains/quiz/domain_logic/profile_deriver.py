"""Profile derivation: question route plus body metrics from raw profile input.

The route is binary and fixed: "female" only when the user reports that they
menstruate, "male" otherwise.

For the "ft" height unit the raw number is multiplied by 30.48 in both
metrics, but only BMI divides the result by 100. Both formulas are kept as
shipped.

No validation happens here. NaN inputs produce NaN metrics.
"""

from __future__ import annotations

from facebloat.domains.quiz.domain_logic.models import (
    DerivedProfile,
    ProfileMetrics,
    ProfileState,
    Route,
)

CM_PER_FOOT = 30.48
KG_PER_LB = 0.453592
CM_PER_INCH = 2.54


def _present(value: float | None) -> bool:
    # Zero counts as "not entered" (and would divide by zero for height).
    return value is not None and value != 0


def derive_route(profile: ProfileState) -> Route:
    return "female" if profile.menstruates == "yes" else "male"


def compute_bmi(profile: ProfileState) -> float | None:
    """BMI from height and weight, or None when either is missing."""
    if not (_present(profile.height) and _present(profile.weight)):
        return None

    height_m = profile.height * CM_PER_FOOT if profile.height_unit == "ft" else profile.height
    height_m = height_m / 100

    weight_kg = profile.weight * KG_PER_LB if profile.weight_unit == "lbs" else profile.weight
    return weight_kg / (height_m * height_m)


def compute_waist_to_height(profile: ProfileState) -> float | None:
    """Waist-to-height ratio, or None when waist or height is missing."""
    if not (_present(profile.waist) and _present(profile.height)):
        return None

    waist_cm = profile.waist * CM_PER_INCH if profile.waist_unit == "in" else profile.waist
    height_cm = profile.height * CM_PER_FOOT if profile.height_unit == "ft" else profile.height
    return waist_cm / height_cm


def derive_profile(profile: ProfileState) -> DerivedProfile:
    """Map raw profile input to a route and the metrics its inputs allow."""
    return DerivedProfile(
        route=derive_route(profile),
        metrics=ProfileMetrics(
            bmi=compute_bmi(profile),
            waist_to_height=compute_waist_to_height(profile),
        ),
    )
