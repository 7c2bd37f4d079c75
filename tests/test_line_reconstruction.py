"""
Unit Tests for line reconstruction

Tests grouping of unordered word annotations into reading-order lines:
- y-sort + pinned anchor grouping with a configurable threshold
- left-to-right ordering inside a line
- line numbering, bounding boxes, and input-order independence

Run with: pytest tests/test_line_reconstruction.py -v
"""

import random

import pytest

from vision_gateway.services.annotation_normalizer import WordAnnotation, normalize_annotations
from vision_gateway.services.line_reconstruction import (
    DEFAULT_LINE_THRESHOLD,
    organize_text_by_lines,
)


def word(text, x, y, width=30, height=10, confidence=0.9):
    return WordAnnotation(
        text=text,
        confidence=confidence,
        vertices=((x, y), (x + width, y), (x + width, y + height), (x, y + height)),
    )


def random_words(seed, count=60):
    rng = random.Random(seed)
    xs = rng.sample(range(500), count)
    return [word(f"w{i}", xs[i], rng.randint(0, 300)) for i in range(count)]


def snapshot(lines):
    return [(line.line_number, [w.text for w in line.words]) for line in lines]


class TestBasicGrouping:
    """Test the documented grouping examples."""

    def test_empty_input_returns_no_lines(self):
        assert organize_text_by_lines([]) == []

    def test_single_word_is_single_line(self):
        lines = organize_text_by_lines([word("Hello", 10, 10)])

        assert len(lines) == 1
        assert lines[0].line_number == 1
        assert lines[0].text == "Hello"
        assert lines[0].word_count == 1

    def test_words_regrouped_and_sorted_by_x(self):
        """A(y=10,x=50), B(y=12,x=10) share a line; C(y=60) starts another."""
        words = [word("A", 50, 10), word("B", 10, 12), word("C", 5, 60)]

        lines = organize_text_by_lines(words)

        assert [(l.line_number, l.text) for l in lines] == [(1, "B A"), (2, "C")]

    def test_single_word_without_geometry_has_zero_box(self):
        _, words = normalize_annotations([{"description": "X"}, {"description": "X"}])

        lines = organize_text_by_lines(words)

        assert len(lines) == 1
        box = lines[0].bounding_box
        assert (box.min_x, box.max_x, box.min_y, box.max_y) == (0, 0, 0, 0)

    def test_default_threshold_is_twenty(self):
        assert DEFAULT_LINE_THRESHOLD == 20

    def test_difference_equal_to_threshold_stays_on_line(self):
        lines = organize_text_by_lines([word("a", 0, 100), word("b", 40, 120)])

        assert len(lines) == 1

    def test_difference_above_threshold_opens_new_line(self):
        lines = organize_text_by_lines([word("a", 0, 100), word("b", 40, 121)])

        assert [l.text for l in lines] == ["a", "b"]


class TestPinnedAnchor:
    """The anchor is the y of the word that opened the line and is never recomputed."""

    def test_anchor_is_first_word_y(self):
        lines = organize_text_by_lines([word("b", 50, 15), word("a", 0, 5)])

        assert lines[0].average_y == 5

    def test_drifting_words_split_relative_to_first_word(self):
        """15 is within 20 of 0, but 30 is not, even though 30 is within 20 of 15."""
        words = [word("a", 0, 0), word("b", 40, 15), word("c", 80, 30)]

        lines = organize_text_by_lines(words)

        assert [l.text for l in lines] == ["a b", "c"]
        assert lines[1].average_y == 30

    def test_skewed_text_splits_into_several_lines(self):
        words = [word(f"w{i}", i * 40, i * 8) for i in range(8)]

        lines = organize_text_by_lines(words)

        assert [l.text for l in lines] == ["w0 w1 w2", "w3 w4 w5", "w6 w7"]


class TestThresholdParameter:
    """Test the configurable grouping threshold."""

    def test_smaller_threshold_splits_more(self):
        words = [word("a", 0, 10), word("b", 40, 18)]

        assert len(organize_text_by_lines(words, line_threshold=20)) == 1
        assert len(organize_text_by_lines(words, line_threshold=5)) == 2

    def test_larger_threshold_merges_lines(self):
        words = [word("a", 0, 10), word("b", 40, 50)]

        lines = organize_text_by_lines(words, line_threshold=50)

        assert [l.text for l in lines] == ["a b"]


class TestBoundingBox:
    """Test line bounding boxes."""

    def test_box_covers_all_member_words(self):
        words = [word("a", 10, 100, width=20, height=12), word("b", 50, 104, width=40, height=10)]

        box = organize_text_by_lines(words)[0].bounding_box

        assert box.min_x == 10
        assert box.max_x == 90
        assert box.min_y == 100
        assert box.max_y == 114

    def test_missing_bottom_right_corner_does_not_shrink_box(self):
        partial = WordAnnotation(
            text="p",
            vertices=((70, 40), (0, 0), (0, 0), (0, 0)),
            present=(True, False, False, False),
        )

        box = organize_text_by_lines([word("a", 10, 40), partial])[0].bounding_box

        assert box.min_x == 10
        assert box.max_x == 70
        assert box.max_y == 50

    def test_rotated_token_is_covered(self):
        """A 180 degree rotated token lists its corners starting from the bottom-right."""
        rotated = WordAnnotation(text="r", vertices=((100, 50), (60, 50), (60, 40), (100, 40)))

        box = organize_text_by_lines([rotated])[0].bounding_box

        assert (box.min_x, box.max_x, box.min_y, box.max_y) == (60, 100, 40, 50)

    def test_word_without_geometry_gives_zero_box(self):
        bare = WordAnnotation(text="m", present=(False, False, False, False))

        box = organize_text_by_lines([bare])[0].bounding_box

        assert (box.min_x, box.max_x, box.min_y, box.max_y) == (0, 0, 0, 0)


class TestProperties:
    """Property checks over randomly generated word sets."""

    @pytest.mark.parametrize("seed", range(10))
    def test_every_word_in_exactly_one_line(self, seed):
        words = random_words(seed)

        lines = organize_text_by_lines(words)
        assigned = [w.text for line in lines for w in line.words]

        assert sorted(assigned) == sorted(w.text for w in words)
        assert len(assigned) == len(set(assigned))

    @pytest.mark.parametrize("seed", range(10))
    def test_line_numbers_are_contiguous(self, seed):
        lines = organize_text_by_lines(random_words(seed))

        assert [l.line_number for l in lines] == list(range(1, len(lines) + 1))

    @pytest.mark.parametrize("seed", range(10))
    def test_members_within_threshold_of_anchor(self, seed):
        lines = organize_text_by_lines(random_words(seed))

        for line in lines:
            for w in line.words:
                assert abs(w.top - line.average_y) <= DEFAULT_LINE_THRESHOLD

    @pytest.mark.parametrize("seed", range(10))
    def test_new_line_starts_beyond_threshold_of_previous_anchor(self, seed):
        lines = organize_text_by_lines(random_words(seed))

        for previous, current in zip(lines, lines[1:]):
            opener_y = current.average_y
            assert opener_y - previous.average_y > DEFAULT_LINE_THRESHOLD
            assert min(w.top for w in current.words) == opener_y

    @pytest.mark.parametrize("seed", range(10))
    def test_words_left_to_right_within_line(self, seed):
        for line in organize_text_by_lines(random_words(seed)):
            xs = [w.left for w in line.words]
            assert xs == sorted(xs)
            assert line.text == " ".join(w.text for w in line.words)

    @pytest.mark.parametrize("seed", range(10))
    def test_output_independent_of_input_order(self, seed):
        words = random_words(seed)
        presorted = sorted(words, key=lambda w: (w.top, w.left))
        shuffled = list(words)
        random.Random(seed + 100).shuffle(shuffled)

        expected = snapshot(organize_text_by_lines(presorted))

        assert snapshot(organize_text_by_lines(shuffled)) == expected
        assert snapshot(organize_text_by_lines(list(reversed(words)))) == expected

    def test_does_not_mutate_input(self):
        words = [word("b", 50, 10), word("a", 0, 10)]
        original = list(words)

        organize_text_by_lines(words)

        assert words == original
