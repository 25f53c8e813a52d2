"""Unit tests for the Image accumulation buffer.

Tests cover:
- Size validation
- Pixel addition and indexing
- Merging: counts, sums, commutativity, associativity, size mismatch
- Averaging and byte export
- State snapshots
"""

import numpy as np
import pytest

from gus.core.image import Image, Size
from gus.materials.spectrum import RGB


def random_image(size, seed, count):
    image = Image(size)
    image.data[:] = np.random.default_rng(seed).uniform(0.0, 3.0, size=image.data.shape)
    image.count = count
    return image


class TestSize:
    """Tests for Size."""

    def test_pixel_count(self):
        assert Size(4, 3).pixel_count == 12

    @pytest.mark.parametrize("h, v", [(0, 3), (4, 0), (-1, 2)])
    def test_rejects_non_positive(self, h, v):
        with pytest.raises(ValueError, match="positive"):
            Size(h, v)


class TestImageBasics:
    """Tests for Image construction and pixel access."""

    def test_new_image_is_zero(self):
        image = Image(Size(4, 3))
        assert image.data.shape == (12, 3)
        assert image.data.dtype == np.float64
        assert image.count == 0
        assert not image.data.any()

    def test_index_is_row_major(self):
        image = Image(Size(4, 3))
        assert image.index(0, 0) == 0
        assert image.index(0, 3) == 3
        assert image.index(2, 1) == 9

    def test_add_accumulates(self):
        image = Image(Size(2, 2))
        image.add(image.index(1, 0), RGB(0.5, 0.25, 1.0))
        image.add(image.index(1, 0), RGB(0.5, 0.25, 1.0))
        assert image.pixel(1, 0) == RGB(1.0, 0.5, 2.0)
        assert image.pixel(0, 0) == RGB(0.0, 0.0, 0.0)

    def test_copy_is_independent(self):
        image = random_image(Size(2, 2), seed=1, count=3)
        duplicate = image.copy()
        duplicate.data[0, 0] += 1.0
        duplicate.count += 1
        assert image.count == 3
        assert image.data[0, 0] != duplicate.data[0, 0]


class TestImageMerge:
    """Tests for Image.append."""

    def test_sums_counts_and_pixels(self):
        a = random_image(Size(3, 2), seed=1, count=2)
        b = random_image(Size(3, 2), seed=2, count=5)
        expected = a.data + b.data

        a.append(b)

        assert a.count == 7
        assert np.array_equal(a.data, expected)

    def test_merge_is_commutative(self):
        a = random_image(Size(3, 2), seed=1, count=2)
        b = random_image(Size(3, 2), seed=2, count=5)

        ab = a.copy()
        ab.append(b)
        ba = b.copy()
        ba.append(a)

        assert ab.count == ba.count
        assert np.array_equal(ab.data, ba.data)

    def test_merge_is_associative(self):
        a = random_image(Size(3, 2), seed=1, count=1)
        b = random_image(Size(3, 2), seed=2, count=2)
        c = random_image(Size(3, 2), seed=3, count=3)

        left = a.copy()
        left.append(b)
        left.append(c)

        bc = b.copy()
        bc.append(c)
        right = a.copy()
        right.append(bc)

        assert left.count == right.count == 6
        np.testing.assert_allclose(left.data, right.data, rtol=1e-12)

    def test_size_mismatch_raises(self):
        """Test that images are never resized to fit."""
        a = Image(Size(3, 2))
        b = Image(Size(2, 3))
        with pytest.raises(ValueError, match="Cannot merge"):
            a.append(b)
        assert a.count == 0


class TestImageExport:
    """Tests for averaging and byte export."""

    def test_average_of_empty_image_is_zero(self):
        assert not Image(Size(2, 2)).average().any()

    def test_zero_count_bitmap_is_black(self):
        image = Image(Size(2, 2))
        image.data[:] = 5.0
        assert not image.bitmap().any()

    def test_bitmap_averages_scales_and_clamps(self):
        image = Image(Size(1, 1))
        image.data[0] = (1.0, 4.0, -2.0)
        image.count = 2
        bitmap = image.bitmap(scale=0.5)
        assert bitmap.dtype == np.uint8
        assert bitmap.tolist() == [63, 255, 0]

    def test_bitmap_channel_order_and_length(self):
        image = Image(Size(2, 1))
        image.add(1, RGB(1.0, 0.0, 0.2))
        image.count = 1
        assert image.bitmap().tolist() == [0, 0, 0, 255, 0, 51]
        assert image.raw_rgb() == bytes([0, 0, 0, 255, 0, 51])

    def test_bitmap_maps_nan_to_black(self):
        image = Image(Size(1, 1))
        image.data[0] = (np.nan, 1.0, 1.0)
        image.count = 1
        assert image.bitmap().tolist() == [0, 255, 255]


class TestImageState:
    """Tests for to_state and from_state."""

    def test_round_trip(self):
        image = random_image(Size(3, 2), seed=4, count=9)
        restored = Image.from_state(image.to_state())
        assert restored.size == image.size
        assert restored.count == 9
        assert np.array_equal(restored.data, image.data)

    def test_state_is_a_snapshot(self):
        image = random_image(Size(3, 2), seed=4, count=9)
        state = image.to_state()
        image.data[:] = 0.0
        assert state["data"].any()

    def test_rejects_mismatched_data(self):
        state = random_image(Size(3, 2), seed=4, count=1).to_state()
        state["vertical_count"] = 3
        with pytest.raises(ValueError, match="does not match"):
            Image.from_state(state)

    def test_rejects_negative_count(self):
        state = Image(Size(1, 1)).to_state()
        state["count"] = -1
        with pytest.raises(ValueError, match="non-negative"):
            Image.from_state(state)

    def test_rejects_missing_field(self):
        state = Image(Size(1, 1)).to_state()
        del state["data"]
        with pytest.raises(KeyError):
            Image.from_state(state)
