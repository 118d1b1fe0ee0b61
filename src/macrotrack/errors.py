"""Precondition failures surfaced to callers.

These are caller-correctable conditions (missing profile, no data, no
usable foods, missing targets). They are raised where detected and never
retried.
"""

from __future__ import annotations


class PreconditionError(ValueError):
    """Base class for labeled precondition failures."""

    label = "precondition_failed"


class ProfileNotFoundError(PreconditionError):
    """No profile exists for the requested id."""

    label = "profile_not_found"


class NoWeightDataError(PreconditionError):
    """The profile has no weight-log data to derive weeks from."""

    label = "no_weight_data"


class PhaseNotFoundError(PreconditionError):
    """A diet phase id or key does not belong to the profile."""

    label = "phase_not_found"


class MissingTargetsError(PreconditionError):
    """Meal planning needs all four calorie/macro targets."""

    label = "targets_required"


class NoUsableFoodsError(PreconditionError):
    """The food catalog has nothing the meal planner may use."""

    label = "no_usable_foods"
