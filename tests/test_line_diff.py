"""Tests for line splitting and the line differ."""

import pytest

from linepatch.core.diff import DiffAlgorithm, LineDiffer, LineDiffOptions, diff_texts, split_lines
from linepatch.core.errors import InvalidInputError
from linepatch.core.models import DiffBlock


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def apply_blocks(old_lines, new_lines, blocks):
    """Rebuild the new line sequence from the old one and the blocks."""
    result = []
    old_pos = 0
    for block in blocks:
        result.extend(old_lines[old_pos:block.delete_start])
        result.extend(new_lines[block.insert_start:block.insert_end])
        old_pos = block.delete_end
    result.extend(old_lines[old_pos:])
    return result


def lcs_length(a, b):
    table = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) - 1, -1, -1):
        for j in range(len(b) - 1, -1, -1):
            if a[i] == b[j]:
                table[i][j] = table[i + 1][j + 1] + 1
            else:
                table[i][j] = max(table[i + 1][j], table[i][j + 1])
    return table[0][0]


PAIRS = [
    ("", ""),
    ("", "a\n"),
    ("a\n", ""),
    ("foo\nbar\n", "foo\nbaz\n"),
    ("a\nb\nc\nd\n", "a\nc\nd\ne\n"),
    ("x\ny", "y\nx\n"),
    ("\n".join("abcabba"), "\n".join("cbabac")),
    ("one\ntwo\nthree\nfour\nfive", "zero\ntwo\nthree\n3.5\nfive\nsix"),
    ("a\r\nb\r\nc", "a\nb\nc\n"),
    ("same\nsame\nsame\n", "same\nother\nsame\n"),
]


# -----------------------------------------------------------------------------
# split_lines
# -----------------------------------------------------------------------------


def test_split_keeps_trailing_empty_line():
    assert split_lines("a\nb\n") == (["a", "b", ""], ["\n", "\n", ""])


def test_split_empty_text_is_one_empty_line():
    assert split_lines("") == ([""], [""])


def test_split_mixed_terminators():
    lines, terminators = split_lines("a\r\nb\rc\nd")
    assert lines == ["a", "b", "c", "d"]
    assert terminators == ["\r\n", "\r", "\n", ""]


def test_split_lone_cr_before_lf_is_one_boundary():
    assert split_lines("\r\n\r") == (["", "", ""], ["\r\n", "\r", ""])


# -----------------------------------------------------------------------------
# LineDiffer
# -----------------------------------------------------------------------------


def test_identical_texts_have_no_blocks():
    result = diff_texts("a\nb\nc\n", "a\nb\nc\n")
    assert result.blocks == []
    assert result.is_identical


def test_single_replacement_is_one_block():
    result = diff_texts("a\nb\nc\nd", "a\nx\nc\nd")
    assert result.blocks == [DiffBlock(1, 1, 1, 1)]


def test_pure_insertion_block():
    result = diff_texts("a\nc\n", "a\nb\nc\n")
    assert result.blocks == [DiffBlock(1, 0, 1, 1)]


def test_pure_deletion_block():
    result = diff_texts("a\nb\nc\n", "a\nc\n")
    assert result.blocks == [DiffBlock(1, 1, 1, 0)]


def test_whitespace_is_significant():
    result = diff_texts("a \nb\n", "a\nb\n")
    assert result.blocks == [DiffBlock(0, 1, 0, 1)]


def test_line_ending_style_alone_is_not_a_line_change():
    result = diff_texts("a\r\nb\r\n", "a\nb\n")
    assert result.blocks == []
    assert result.old_terminators == ["\r\n", "\r\n", ""]
    assert result.new_terminators == ["\n", "\n", ""]


@pytest.mark.parametrize("old, new", PAIRS)
def test_blocks_rebuild_new_lines(old, new):
    result = diff_texts(old, new)
    assert apply_blocks(result.old_lines, result.new_lines, result.blocks) == result.new_lines


@pytest.mark.parametrize("old, new", PAIRS)
def test_blocks_are_ordered_and_balanced(old, new):
    result = diff_texts(old, new)
    deleted = sum(block.delete_count for block in result.blocks)
    inserted = sum(block.insert_count for block in result.blocks)
    assert len(result.old_lines) - deleted == len(result.new_lines) - inserted

    for before, after in zip(result.blocks, result.blocks[1:]):
        assert before.delete_end < after.delete_start or before.insert_end < after.insert_start
        assert after.delete_start >= before.delete_end
        assert after.insert_start >= before.insert_end


@pytest.mark.parametrize("old, new", PAIRS)
def test_myers_edit_script_is_minimal(old, new):
    result = diff_texts(old, new)
    deleted = sum(block.delete_count for block in result.blocks)
    assert len(result.old_lines) - deleted == lcs_length(result.old_lines, result.new_lines)


def test_classic_myers_example_distance():
    old = "\n".join("abcabba")
    new = "\n".join("cbabac")
    result = diff_texts(old, new)
    changes = sum(b.delete_count + b.insert_count for b in result.blocks)
    assert changes == 5


@pytest.mark.parametrize("old, new", PAIRS)
def test_sequence_matcher_blocks_rebuild_new_lines(old, new):
    options = LineDiffOptions(algorithm=DiffAlgorithm.SEQUENCE_MATCHER)
    result = LineDiffer(options).diff(old, new)
    assert apply_blocks(result.old_lines, result.new_lines, result.blocks) == result.new_lines


def test_none_input_is_rejected():
    differ = LineDiffer()
    with pytest.raises(InvalidInputError):
        differ.diff(None, "a")
    with pytest.raises(ValueError):
        differ.diff("a", None)


def test_diff_block_requires_a_change():
    with pytest.raises(ValueError):
        DiffBlock(0, 0, 0, 0)
