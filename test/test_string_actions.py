import pytest

from ilfunc.errors import EditConflictError
from ilfunc.string_actions import InsertBlock, RemoveBlock, StringAction, apply_actions


def test_remove_then_insert():
    assert apply_actions("ABCDEFGH", [RemoveBlock(1, 2), InsertBlock(5, "XY")]) == "ADEXYFGH"


def test_order_of_the_list_does_not_matter():
    assert apply_actions("ABCDEFGH", [InsertBlock(5, "XY"), RemoveBlock(1, 2)]) == "ADEXYFGH"


def test_insert_then_remove_at_same_offset():
    # how a stub body gets replaced: new text first, then the old one removed
    actions = [InsertBlock(2, "new"), RemoveBlock(2, 4)]
    assert apply_actions("..old!..", actions) == "..new.."


def test_inserts_at_same_offset_keep_their_order():
    assert apply_actions("ab", [InsertBlock(1, "1"), InsertBlock(1, "2")]) == "a12b"


def test_edges_of_the_text():
    actions = [InsertBlock(0, "<"), RemoveBlock(0, 1), InsertBlock(4, ">")]
    assert apply_actions("abcd", actions) == "<bcd>"


def test_no_actions():
    assert apply_actions("unchanged", []) == "unchanged"


def test_length_accounting():
    text = "0123456789" * 3
    actions = [RemoveBlock(2, 5), InsertBlock(10, "abc"), RemoveBlock(12, 1),
               InsertBlock(20, "defghij"), RemoveBlock(25, 5)]
    result = apply_actions(text, actions)
    assert len(result) == len(text) - (5 + 1 + 5) + (3 + 7)
    assert result == "01" "789" "abc" "01" "3456789" "defghij" "01234"


def test_overlapping_removals():
    with pytest.raises(EditConflictError):
        apply_actions("abcdef", [RemoveBlock(0, 3), RemoveBlock(2, 2)])


def test_insert_inside_removal():
    with pytest.raises(EditConflictError):
        apply_actions("abcdef", [RemoveBlock(1, 3), InsertBlock(2, "x")])


def test_past_the_end():
    with pytest.raises(EditConflictError):
        apply_actions("abc", [RemoveBlock(2, 2)])
    with pytest.raises(EditConflictError):
        apply_actions("abc", [InsertBlock(4, "x")])


def test_negative_values():
    with pytest.raises(ValueError):
        RemoveBlock(-1, 1)
    with pytest.raises(ValueError):
        RemoveBlock(0, -1)


def test_action_equality():
    assert RemoveBlock(1, 2) == RemoveBlock(1, 2)
    assert RemoveBlock(1, 2) != InsertBlock(1, "2")
    assert repr(InsertBlock(3, "x")) == "InsertBlock(start=3, block='x')"


def test_base_action_is_abstract():
    with pytest.raises(TypeError):
        StringAction(0)
