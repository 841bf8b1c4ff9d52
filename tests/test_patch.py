"""Tests for the patch engine (no network)."""

import pytest

from kvhttp import (
    MISSING,
    AddTo,
    Fields,
    InvalidArgument,
    Scalar,
    SetField,
    SubFrom,
    apply_instruction,
    apply_patch,
    classify,
    merge_fields,
    parse_patch,
)
from kvhttp.errors import InvalidValue
from kvhttp.patch import as_document


class TestSetField:
    @pytest.mark.parametrize("current", ["s", 1, 1.5, [1], {"a": 1}, None, True, MISSING])
    def test_overwrites_any_type(self, current):
        assert apply_instruction(current, SetField("f", "new")) == "new"


class TestAddTo:
    def test_string_concatenates(self):
        assert apply_instruction("foo", AddTo("f", "bar")) == "foobar"

    def test_string_coerces_operand_to_json_text(self):
        assert apply_instruction("n=", AddTo("f", 3)) == "n=3"
        assert apply_instruction("ok:", AddTo("f", True)) == "ok:true"
        assert apply_instruction("v:", AddTo("f", None)) == "v:null"

    def test_number_adds(self):
        assert apply_instruction(5, AddTo("f", 3)) == 8
        assert apply_instruction(1.5, AddTo("f", 1)) == 2.5
        assert apply_instruction(-2, AddTo("f", -3)) == -5

    def test_number_rejects_non_number_operand(self):
        with pytest.raises(InvalidArgument, match="not a number"):
            apply_instruction(5, AddTo("f", "3"))
        with pytest.raises(InvalidArgument):
            apply_instruction(5, AddTo("f", True))

    def test_list_appends_single_element(self):
        assert apply_instruction(["a"], AddTo("f", "b")) == ["a", "b"]

    def test_list_appends_sequence_as_one_element(self):
        assert apply_instruction([1], AddTo("f", [2, 3])) == [1, [2, 3]]

    def test_list_is_not_mutated(self):
        original = ["a"]
        apply_instruction(original, AddTo("f", "b"))
        assert original == ["a"]

    @pytest.mark.parametrize("current", [None, True, False, {"a": 1}, MISSING])
    def test_other_types_are_noop(self, current):
        assert apply_instruction(current, AddTo("f", 1)) is current


class TestSubFrom:
    def test_string_truncates(self):
        assert apply_instruction("hello", SubFrom("f", 2)) == "hel"

    def test_string_uses_absolute_count(self):
        assert apply_instruction("hello", SubFrom("f", -2)) == "hel"

    def test_string_truncates_to_empty(self):
        assert apply_instruction("hi", SubFrom("f", 2)) == ""
        assert apply_instruction("hi", SubFrom("f", 10)) == ""

    def test_zero_leaves_string_and_list_unchanged(self):
        assert apply_instruction("hi", SubFrom("f", 0)) == "hi"
        assert apply_instruction([1, 2], SubFrom("f", 0)) == [1, 2]

    def test_integral_float_count(self):
        assert apply_instruction("hello", SubFrom("f", 2.0)) == "hel"

    def test_bad_count(self):
        with pytest.raises(InvalidArgument, match="integer count"):
            apply_instruction("hello", SubFrom("f", 1.5))
        with pytest.raises(InvalidArgument):
            apply_instruction([1, 2], SubFrom("f", "1"))

    def test_number_subtracts(self):
        assert apply_instruction(8, SubFrom("f", 3)) == 5
        assert apply_instruction(8, SubFrom("f", -3)) == 11

    def test_list_truncates(self):
        assert apply_instruction([1, 2, 3], SubFrom("f", 1)) == [1, 2]
        assert apply_instruction([1, 2, 3], SubFrom("f", 5)) == []

    @pytest.mark.parametrize("current", [None, True, {"a": 1}, MISSING])
    def test_other_types_are_noop(self, current):
        assert apply_instruction(current, SubFrom("f", 1)) is current


class TestParsePatch:
    def test_partitions_operators_and_plain_fields(self):
        parsed = parse_patch({"name": "x", "$add": {"count": 1}, "$set": {"a": 2}})
        assert parsed.instructions == [AddTo("count", 1), SetField("a", 2)]
        assert parsed.plain == {"name": "x"}

    def test_unknown_dollar_key_is_plain(self):
        parsed = parse_patch({"$inc": {"a": 1}})
        assert parsed.instructions == []
        assert parsed.plain == {"$inc": {"a": 1}}

    @pytest.mark.parametrize("payload", [{}, {"a": 1, "b": 2}, 5, ["a", 1], None])
    def test_rejects_payloads_without_exactly_one_entry(self, payload):
        with pytest.raises(InvalidArgument, match=r"\$add expects"):
            parse_patch({"$add": payload})

    def test_rejects_non_string_field(self):
        with pytest.raises(InvalidArgument, match="field name"):
            parse_patch({"$set": {1: "x"}})


class TestApplyPatch:
    def test_set_keeps_other_fields(self):
        doc = {"field": "old", "other": "y"}
        assert apply_patch(doc, {"$set": {"field": "x"}}) == {"field": "x", "other": "y"}

    def test_add_and_sub_together(self):
        doc = {"count": 5, "name": "hello", "tags": ["a"]}
        result = apply_patch(doc, {"$add": {"tags": "b"}, "$sub": {"name": 2}})
        assert result == {"count": 5, "name": "hel", "tags": ["a", "b"]}

    def test_plain_fields_apply_after_operators(self):
        # Plain entry comes first in iteration order but still wins.
        patch = {"count": 100, "$add": {"count": 1}}
        assert apply_patch({"count": 5}, patch) == {"count": 100}

    def test_add_to_missing_field_does_not_create_it(self):
        assert apply_patch({"a": 1}, {"$add": {"b": 1}}) == {"a": 1}

    def test_set_creates_missing_field(self):
        assert apply_patch({}, {"$set": {"b": 1}}) == {"b": 1}

    def test_input_is_not_mutated(self):
        doc = {"tags": ["a"], "n": 1}
        apply_patch(doc, {"$add": {"tags": "b"}, "n": 2})
        assert doc == {"tags": ["a"], "n": 1}


class TestMergeFields:
    def test_flat_merge(self):
        assert merge_fields({"a": 0, "c": 3}, {"a": 1, "b": 2}) == {"a": 1, "b": 2, "c": 3}

    def test_operator_names_are_plain(self):
        assert merge_fields({}, {"$add": {"n": 1}}) == {"$add": {"n": 1}}


class TestClassify:
    def test_mapping_is_fields(self):
        assert classify({"a": 1}) == Fields({"a": 1})

    @pytest.mark.parametrize("value", [1, "s", [1, 2], None, True])
    def test_everything_else_is_scalar(self, value):
        assert classify(value) == Scalar(value)

    def test_wrapped_values_pass_through(self):
        wrapped = Scalar({"a": 1})
        assert classify(wrapped) is wrapped


class TestAsDocument:
    def test_missing_is_empty_object(self):
        assert as_document("k", MISSING) == {}

    def test_mapping_is_copied(self):
        doc = {"a": 1}
        result = as_document("k", doc)
        assert result == doc
        assert result is not doc

    @pytest.mark.parametrize("value", ["text", 3, [1], None])
    def test_non_mapping_raises(self, value):
        with pytest.raises(InvalidValue, match="not an object"):
            as_document("k", value)
