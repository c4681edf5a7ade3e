"""Tests for expanding diff blocks into pieces."""

import pytest

from linepatch.core.diff import build_diff_model
from linepatch.core.models import ChangeType

U, D, I = ChangeType.UNCHANGED, ChangeType.DELETED, ChangeType.INSERTED


def kinds(model):
    return [(piece.change_type, piece.text) for piece in model.pieces]


def test_replacement_between_unchanged_lines():
    model = build_diff_model("foo\nbar\n", "foo\nbaz\n")
    assert kinds(model) == [(U, "foo"), (D, "bar"), (I, "baz"), (U, "")]


def test_deleted_and_inserted_lines_are_interleaved():
    model = build_diff_model("a\nb\nc", "x\ny\nz\nw")
    assert kinds(model) == [
        (D, "a"), (I, "x"),
        (D, "b"), (I, "y"),
        (D, "c"), (I, "z"),
        (I, "w"),
    ]


def test_excess_deletions_trail_the_pairs():
    model = build_diff_model("a\nb\nc\nd", "a\nx")
    assert kinds(model) == [(U, "a"), (D, "b"), (I, "x"), (D, "c"), (D, "d")]


def test_line_numbers_follow_their_text():
    model = build_diff_model("foo\nbar\n", "foo\nbaz\n")
    unchanged, deleted, inserted, _ = model.pieces

    assert (unchanged.old_line_number, unchanged.new_line_number) == (1, 1)
    assert (deleted.old_line_number, deleted.new_line_number) == (2, None)
    assert (inserted.old_line_number, inserted.new_line_number) == (None, 2)


def test_terminators_on_pieces():
    model = build_diff_model("a\r\nb", "a\nc\n")
    unchanged = model.pieces[0]
    assert unchanged.terminator == "\n"
    assert unchanged.old_terminator == "\r\n"

    deleted = [p for p in model.pieces if p.change_type is D]
    assert deleted[0].terminator == ""


def test_statistics_and_changes():
    model = build_diff_model("a\nb\nc\n", "a\nB\nc\nd\n")
    assert model.has_differences
    assert model.statistics.unchanged_lines == 3
    assert model.statistics.deleted_lines == 1
    assert model.statistics.inserted_lines == 2
    assert [str(p) for p in model.iter_changes()] == ["-b", "+B", "+d"]


def test_identical_texts_yield_only_unchanged_pieces():
    model = build_diff_model("a\nb", "a\nb")
    assert not model.has_differences
    assert all(p.change_type is U for p in model.pieces)


@pytest.mark.parametrize("old, new", [
    ("", ""),
    ("", "a"),
    ("a\n", ""),
    ("a\r\nb\rc\n", "a\nb\nc"),
    ("one\ntwo\nthree\n", "two\nthree\nfour\n"),
    ("x\ny", "y\nx\n"),
])
def test_pieces_reconstruct_both_texts(old, new):
    model = build_diff_model(old, new)
    assert model.new_text() == new
    assert model.old_text() == old
