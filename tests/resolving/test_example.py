"""
Unit Tests for Example Helpers

Tests for realign_tabs() and split_example().
"""

import pytest

from pullquote.core.errors import ExampleSplitError
from pullquote.resolving import realign_tabs, split_example

EXAMPLE = "func ExampleHello() {\n\tHello()\n\t// Output:\n\t// hi\n}"


class TestRealignTabs:
    """Tests for realign_tabs()."""

    def test_realign_when_single_line_then_unchanged(self):
        assert realign_tabs("x := 1") == "x := 1"

    def test_realign_when_comment_first_then_removes_all_continuation_tabs(self):
        assert realign_tabs("// doc\n\tFoo = iota") == "// doc\nFoo = iota"

    def test_realign_when_code_first_then_keeps_one_level(self):
        found = "func f() {\n\t\t\treturn\n\t\t}"
        assert realign_tabs(found) == "func f() {\n\treturn\n}"

    def test_realign_when_already_aligned_then_unchanged(self):
        found = "func f() {\n\treturn\n}"
        assert realign_tabs(found) == found


class TestSplitExample:
    """Tests for split_example()."""

    def test_split_when_output_comment_then_code_and_output(self):
        assert split_example(EXAMPLE) == ("Hello()", "hi")

    def test_split_when_doc_comment_first_then_skipped(self):
        assert split_example("// ExampleHello shows Hello.\n" + EXAMPLE) == ("Hello()", "hi")

    def test_split_when_multiline_output_then_joined(self):
        text = "func ExampleX() {\n\ta()\n\tb()\n\t// Output:\n\t// one\n\t// two\n}"
        assert split_example(text) == ("a()\nb()", "one\ntwo")

    def test_split_when_nested_block_then_relative_indent_kept(self):
        text = "func ExampleX() {\n\tif ok {\n\t\tf()\n\t}\n\t// Output:\n}"
        code, output = split_example(text)
        assert code == "if ok {\n\tf()\n}"
        assert output == ""

    def test_split_when_no_output_comment_then_none(self):
        assert split_example("func ExampleX() {\n\tf()\n}") is None

    def test_split_when_no_function_then_raises(self):
        with pytest.raises(ExampleSplitError):
            split_example("var x = 1")
