"""Tests for the usable-bounds geometry model.

Validates:
    - Nominal surface per rotation (portrait swaps the published size)
    - Inclusive edge accessors and the unset sentinel
    - Centre computation
    - Clamping: invariants hold for any input, idempotence, step-4 slide
    - Orientation label mapping
"""

from __future__ import annotations

import itertools

import pytest

from lcd_calibration.geometry.bounds import (
    MIN_USABLE_SIZE,
    NominalSurface,
    UsableBounds,
    clamp_bounds,
    compute_center,
    is_landscape,
    orientation_label,
    satisfies_invariants,
    validate_rotation,
)


# ---------------------------------------------------------------------------
# Nominal surface
# ---------------------------------------------------------------------------


class TestNominalSurface:
    @pytest.mark.parametrize("rotation", [1, 3])
    def test_landscape_uses_published(self, rotation: int) -> None:
        s = NominalSurface.for_rotation((160, 128), rotation)
        assert (s.width, s.height) == (160, 128)

    @pytest.mark.parametrize("rotation", [0, 2])
    def test_portrait_swaps(self, rotation: int) -> None:
        s = NominalSurface.for_rotation((160, 128), rotation)
        assert (s.width, s.height) == (128, 160)

    def test_too_small_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least"):
            NominalSurface(9, 128)

    def test_invalid_rotation(self) -> None:
        with pytest.raises(ValueError, match="0-3"):
            NominalSurface.for_rotation((160, 128), 4)

    def test_full_bounds(self) -> None:
        assert NominalSurface(160, 128).full_bounds() == UsableBounds(0, 0, 160, 128)

    def test_immutable(self) -> None:
        s = NominalSurface(160, 128)
        with pytest.raises(AttributeError):
            s.width = 10  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Usable bounds
# ---------------------------------------------------------------------------


class TestUsableBounds:
    def test_inclusive_edges(self) -> None:
        b = UsableBounds(1, 2, 159, 126)
        assert (b.left, b.right, b.top, b.bottom) == (1, 159, 2, 127)

    def test_from_edges_inverse(self) -> None:
        b = UsableBounds.from_edges(left=1, right=158, top=2, bottom=127)
        assert b == UsableBounds(1, 2, 158, 126)

    def test_unset_sentinel(self) -> None:
        assert UsableBounds.unset().is_unset
        assert UsableBounds(5, 5, 0, 20).is_unset
        assert UsableBounds(5, 5, 20, 0).is_unset
        assert not UsableBounds(0, 0, 10, 10).is_unset

    def test_describe(self) -> None:
        assert UsableBounds(1, 2, 158, 126).describe() == "1,2 158x126"


class TestCenter:
    def test_full_surface(self) -> None:
        assert compute_center(UsableBounds(0, 0, 160, 128)) == (80, 64)

    def test_floor_division(self) -> None:
        assert compute_center(UsableBounds(1, 2, 159, 126)) == (80, 65)
        assert compute_center(UsableBounds(0, 0, 11, 11)) == (5, 5)

    def test_property_matches_function(self) -> None:
        b = UsableBounds(3, 7, 40, 21)
        assert b.center == compute_center(b)


# ---------------------------------------------------------------------------
# Clamping
# ---------------------------------------------------------------------------


_SURFACES = [NominalSurface(160, 128), NominalSurface(128, 160), NominalSurface(10, 10)]
_ORIGINS = [-50, -1, 0, 1, 5, 118, 127, 150, 155, 159, 200]
_SIZES = [-20, 0, 1, 9, 10, 11, 64, 127, 128, 160, 500]


def _grid():
    for surface in _SURFACES:
        for x, w in itertools.product(_ORIGINS, _SIZES):
            y, h = w % 130, x % 170  # vary the other axis too
            yield surface, UsableBounds(x, y - 20, w, h - 30)


class TestClampBounds:
    def test_valid_bounds_unchanged(self) -> None:
        surface = NominalSurface(160, 128)
        b = UsableBounds(1, 2, 158, 126)
        assert clamp_bounds(surface, b) == (b, False)

    def test_full_surface_unchanged(self) -> None:
        surface = NominalSurface(160, 128)
        assert clamp_bounds(surface, surface.full_bounds()) == (surface.full_bounds(), False)

    def test_negative_origin_and_oversize(self) -> None:
        clamped, modified = clamp_bounds(
            NominalSurface(160, 128), UsableBounds(-5, -3, 200, 300),
        )
        assert modified
        assert clamped == UsableBounds(0, 0, 160, 128)

    def test_size_raised_to_floor(self) -> None:
        clamped, modified = clamp_bounds(
            NominalSurface(160, 128), UsableBounds(20, 20, 3, 0),
        )
        assert modified
        assert clamped == UsableBounds(20, 20, MIN_USABLE_SIZE, MIN_USABLE_SIZE)

    def test_floor_raise_at_edge_slides_origin(self) -> None:
        clamped, _ = clamp_bounds(
            NominalSurface(160, 128), UsableBounds(155, 0, 5, 50),
        )
        assert clamped == UsableBounds(150, 0, 10, 50)

    def test_origin_past_surface(self) -> None:
        clamped, _ = clamp_bounds(
            NominalSurface(160, 128), UsableBounds(200, 200, 10, 10),
        )
        assert clamped == UsableBounds(150, 118, 10, 10)

    def test_invariants_hold_for_any_input(self) -> None:
        for surface, b in _grid():
            clamped, _ = clamp_bounds(surface, b)
            assert satisfies_invariants(surface, clamped), (surface, b, clamped)

    def test_idempotent(self) -> None:
        for surface, b in _grid():
            once, _ = clamp_bounds(surface, b)
            twice, modified = clamp_bounds(surface, once)
            assert twice == once
            assert modified is False

    def test_modified_flag_matches_change(self) -> None:
        for surface, b in _grid():
            clamped, modified = clamp_bounds(surface, b)
            assert modified == (clamped != b)


# ---------------------------------------------------------------------------
# Rotation helpers
# ---------------------------------------------------------------------------


class TestOrientation:
    @pytest.mark.parametrize(
        "rotation, label",
        [
            (0, "portrait"),
            (1, "landscape"),
            (2, "reverse_portrait"),
            (3, "reverse_landscape"),
        ],
    )
    def test_label_mapping(self, rotation: int, label: str) -> None:
        assert orientation_label(rotation) == label

    def test_is_landscape(self) -> None:
        assert [is_landscape(r) for r in range(4)] == [False, True, False, True]

    @pytest.mark.parametrize("bad", [-1, 4, 90])
    def test_invalid(self, bad: int) -> None:
        with pytest.raises(ValueError):
            validate_rotation(bad)
