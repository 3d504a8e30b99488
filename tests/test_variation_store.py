"""
Tests for variation merging and the variation store.
"""

import pytest

from MS_Libs.SessionLib.variation_store import (
    VariationStore,
    dedupe,
    merge_variations,
    selectable_images,
    variations_after_main_change,
)
from conftest import make_buffer


def shades(count):
    """Distinct buffers: grey levels 0, 10, 20, ..."""
    return [make_buffer(4, 4, (level * 10, level * 10, level * 10)) for level in range(count)]


class TestMergeVariations:
    """Tests for merge_variations and dedupe."""

    def test_incoming_first_and_deduplicated(self):
        """Should put incoming images first and drop duplicates."""
        a, b, c = shades(3)
        assert merge_variations([a, b], [b, c]) == [b, c, a]

    def test_equal_content_counts_as_duplicate(self):
        """Should treat equal bytes as duplicates."""
        a = make_buffer(4, 4, (1, 2, 3))
        a_copy = make_buffer(4, 4, (1, 2, 3))
        assert a is not a_copy
        assert merge_variations([a], [a_copy]) == [a_copy]

    def test_capped_at_ten(self):
        """Should keep at most ten variations."""
        existing = shades(8)
        incoming = [make_buffer(4, 4, (255, level, 0)) for level in range(5)]
        merged = merge_variations(existing, incoming)
        assert len(merged) == 10
        assert merged[:5] == incoming
        assert merged[5:] == existing[:5]

    def test_custom_cap(self):
        """Should honour a custom cap."""
        a, b, c = shades(3)
        assert merge_variations([a], [b, c], cap=2) == [b, c]

    def test_negative_cap_raises(self):
        """Should reject a negative cap."""
        with pytest.raises(ValueError):
            merge_variations([], [], cap=-1)

    def test_dedupe_keeps_first(self):
        """Should keep the first occurrence."""
        a, b = shades(2)
        assert dedupe([a, b, a, b]) == [a, b]


class TestMainImageChange:
    """Tests for variations_after_main_change."""

    def test_previous_main_joins_variations(self):
        """Should add the previous main image to variations."""
        old_main, new_main, v1 = shades(3)
        result = variations_after_main_change(old_main, new_main, [v1])
        assert result == [old_main, v1]

    def test_new_main_is_removed(self):
        """Should drop the new main image from variations."""
        old_main, new_main, v1 = shades(3)
        result = variations_after_main_change(old_main, new_main, [v1, new_main])
        assert result == [old_main, v1]

    def test_no_previous_main(self):
        """Should handle a project without a main image."""
        new_main, v1 = shades(2)
        assert variations_after_main_change(None, new_main, [v1]) == [v1]

    def test_cap_applies(self):
        """Should cap the merged variations."""
        images = shades(12)
        old_main, new_main, existing = images[0], images[1], images[2:]
        result = variations_after_main_change(old_main, new_main, existing)
        assert len(result) == 10
        assert result[0] is old_main

    def test_selectable_puts_main_first(self):
        """Should list the main image first."""
        main, v1 = shades(2)
        assert selectable_images(main, [v1, main]) == [main, v1]


class TestVariationStore:
    """Tests for VariationStore."""

    def test_initial_variations_are_deduplicated(self):
        """Should deduplicate initial variations."""
        a, b = shades(2)
        store = VariationStore([a, a, b])
        assert store.variations == [a, b]
        assert len(store) == 2

    def test_add_merges(self):
        """Should merge added variations."""
        a, b, c = shades(3)
        store = VariationStore([a, b])
        assert store.add([b, c]) == [b, c, a]
        assert list(store) == [b, c, a]

    def test_main_change_with_same_content_is_noop(self):
        """Should ignore a main change to identical content."""
        a, b = shades(2)
        store = VariationStore([b])
        copy_of_a = make_buffer(4, 4, (0, 0, 0))
        assert store.on_main_image_changed(a, copy_of_a) == [b]

    def test_main_change(self):
        """Should update variations when the main image changes."""
        old_main, new_main, v1 = shades(3)
        store = VariationStore([new_main, v1])
        assert store.on_main_image_changed(old_main, new_main) == [old_main, v1]

    def test_selectable(self):
        """Should list selectable images."""
        main, v1 = shades(2)
        store = VariationStore([v1])
        assert store.selectable(main) == [main, v1]
