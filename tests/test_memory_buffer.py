"""Tests for the in-memory buffer and its edit scopes."""

import pytest

from linepatch.buffers.memory import InMemoryCaret, InMemoryTextBuffer
from linepatch.core.models import DeleteOperation, InsertOperation


# -----------------------------------------------------------------------------
# TextEdit
# -----------------------------------------------------------------------------


def test_offsets_refer_to_text_before_the_edit():
    buffer = InMemoryTextBuffer("hello world")
    with buffer.create_edit() as edit:
        edit.insert(0, "A")
        edit.delete(6, 5)
        edit.insert(11, "!")
    assert buffer.get_text() == "Ahello !"


def test_inserts_at_one_position_keep_call_order():
    buffer = InMemoryTextBuffer("z")
    with buffer.create_edit() as edit:
        edit.insert(0, "a")
        edit.insert(0, "b")
    assert buffer.get_text() == "abz"


def test_delete_then_insert_at_same_position():
    buffer = InMemoryTextBuffer("xyz")
    with buffer.create_edit() as edit:
        edit.insert(0, "Q")
        edit.delete(0, 1)
    assert buffer.get_text() == "Qyz"


def test_overlapping_deletions_are_rejected():
    buffer = InMemoryTextBuffer("abcdef")
    edit = buffer.create_edit()
    edit.delete(0, 3)
    with pytest.raises(ValueError):
        edit.delete(2, 2)


def test_out_of_range_operations_are_rejected():
    buffer = InMemoryTextBuffer("abc")
    edit = buffer.create_edit()
    with pytest.raises(ValueError):
        edit.delete(2, 5)
    with pytest.raises(ValueError):
        edit.insert(4, "x")


def test_edit_is_discarded_when_block_raises():
    buffer = InMemoryTextBuffer("abc")
    with pytest.raises(KeyError):
        with buffer.create_edit() as edit:
            edit.insert(0, "x")
            raise KeyError("boom")
    assert buffer.get_text() == "abc"
    assert not buffer.can_undo


def test_edit_cannot_be_applied_twice():
    buffer = InMemoryTextBuffer("abc")
    edit = buffer.create_edit()
    edit.insert(0, "x")
    edit.apply()
    with pytest.raises(RuntimeError):
        edit.apply()


def test_empty_operations_are_ignored():
    buffer = InMemoryTextBuffer("abc")
    with buffer.create_edit() as edit:
        edit.delete(1, 0)
        edit.insert(1, "")
        assert not edit.has_changes
    assert buffer.applied_operations == []
    assert not buffer.can_undo


# -----------------------------------------------------------------------------
# Undo history
# -----------------------------------------------------------------------------


def test_standalone_edit_is_its_own_undo_step():
    buffer = InMemoryTextBuffer("abc")
    with buffer.create_edit() as edit:
        edit.delete(0, 1)
    assert buffer.undo_history == ["Edit"]
    assert buffer.undo()
    assert buffer.get_text() == "abc"


def test_transaction_groups_edits_into_one_step():
    buffer = InMemoryTextBuffer("one\ntwo\n")
    with buffer.undo_transaction("Reformat"):
        with buffer.create_edit() as edit:
            edit.delete(0, 3)
        with buffer.create_edit() as edit:
            edit.insert(0, "ONE")
        with buffer.create_edit() as edit:
            edit.insert(8, "three\n")

    assert buffer.get_text() == "ONE\ntwo\nthree\n"
    assert buffer.undo_history == ["Reformat"]

    assert buffer.undo()
    assert buffer.get_text() == "one\ntwo\n"
    assert not buffer.can_undo

    assert buffer.redo()
    assert buffer.get_text() == "ONE\ntwo\nthree\n"


def test_transaction_completes_when_block_raises():
    buffer = InMemoryTextBuffer("abc")
    with pytest.raises(RuntimeError):
        with buffer.undo_transaction("Partial"):
            with buffer.create_edit() as edit:
                edit.insert(3, "d")
            raise RuntimeError("stop")

    assert buffer.get_text() == "abcd"
    assert buffer.undo_history == ["Partial"]
    buffer.undo()
    assert buffer.get_text() == "abc"


def test_empty_transaction_is_not_recorded():
    buffer = InMemoryTextBuffer("abc")
    with buffer.undo_transaction("Nothing"):
        pass
    assert buffer.undo_history == []


def test_nested_transactions_fold_into_outer():
    buffer = InMemoryTextBuffer("abc")
    with buffer.undo_transaction("Outer"):
        with buffer.undo_transaction("Inner"):
            with buffer.create_edit() as edit:
                edit.insert(0, "x")
        with buffer.create_edit() as edit:
            edit.insert(0, "y")
    assert buffer.undo_history == ["Outer"]
    buffer.undo()
    assert buffer.get_text() == "abc"


def test_new_edit_clears_redo():
    buffer = InMemoryTextBuffer("abc")
    with buffer.create_edit() as edit:
        edit.delete(0, 1)
    buffer.undo()
    with buffer.create_edit() as edit:
        edit.insert(0, "z")
    assert not buffer.can_redo


def test_observers_receive_operations():
    buffer = InMemoryTextBuffer("abc")
    seen = []
    buffer.add_observer(seen.append)
    buffer.add_observer(lambda op: 1 / 0)
    with buffer.create_edit() as edit:
        edit.delete(1, 1)
        edit.insert(0, "x")
    assert seen == [DeleteOperation(1, 1), InsertOperation(0, "x")]
    assert buffer.get_text() == "xac"


# -----------------------------------------------------------------------------
# Caret
# -----------------------------------------------------------------------------


def test_caret_rejects_offsets_outside_buffer():
    buffer = InMemoryTextBuffer("abc")
    caret = InMemoryCaret(buffer, 3)
    with pytest.raises(ValueError):
        caret.set_offset(4)
    caret.ensure_visible()
    assert caret.visible_offset == 3
