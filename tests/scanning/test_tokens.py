"""
Unit Tests for the Attribute Tokenizer

Tests for TokenScanner offsets, quoting, escaping and = handling.
"""

import pytest

from pullquote.core.errors import MarkerSyntaxError
from pullquote.scanning import Token, TokenScanner
from pullquote.scanning.tokens import ERR_UNTERMINATED, unescape


def scan(text):
    return list(TokenScanner(text))


def escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


class TestTokenScanner:
    """Tests for TokenScanner."""

    # ─────────────────────────────────────────────────────────────────────────
    # Offsets
    # ─────────────────────────────────────────────────────────────────────────

    def test_scan_when_padded_word_then_offsets_exclude_whitespace(self):
        assert scan("  abc  ") == [Token("abc", 2, 5)]

    def test_scan_when_quoted_with_escaped_quote_then_offsets_cover_raw_token(self):
        assert scan('  "abc \\""  ') == [Token('abc "', 2, 10)]

    def test_scan_when_key_equals_value_then_three_tokens(self):
        assert scan("a=b") == [Token("a", 0, 1), Token("=", 1, 2), Token("b", 2, 3)]

    def test_scan_when_spaced_equals_then_same_texts_as_compact(self):
        assert [t.text for t in scan("key = value")] == [t.text for t in scan("key=value")]

    def test_scan_when_empty_then_no_tokens(self):
        assert scan("") == []
        assert scan("   \t\n") == []

    # ─────────────────────────────────────────────────────────────────────────
    # Quoting and escaping
    # ─────────────────────────────────────────────────────────────────────────

    def test_scan_when_quoted_value_has_spaces_and_equals_then_single_token(self):
        texts = [t.text for t in scan("src='a b=c' x")]
        assert texts == ["src", "=", "a b=c", "x"]

    def test_scan_when_quote_inside_word_then_quotes_removed(self):
        assert [t.text for t in scan('a"b c"d')] == ["ab cd"]

    def test_scan_when_escaped_string_then_round_trips(self):
        for s in ['say "hi"', "back\\slash", 'both \\" mixed', "single ' quote", ""]:
            tokens = scan('"' + escape(s) + '"')
            assert [t.text for t in tokens] == [s]

    def test_scan_when_backslash_before_other_char_then_kept(self):
        assert [t.text for t in scan(r'start="func fooBar\(\) \{"')][2] == r"func fooBar\(\) \{"

    def test_scan_when_escaped_space_then_part_of_word(self):
        assert [t.text for t in scan(r"a\ b c")] == [r"a\ b", "c"]

    # ─────────────────────────────────────────────────────────────────────────
    # Errors
    # ─────────────────────────────────────────────────────────────────────────

    def test_scan_when_unterminated_quote_then_raises_with_offset(self):
        with pytest.raises(MarkerSyntaxError, match=ERR_UNTERMINATED) as exc:
            scan('ok  "abc')
        assert exc.value.offset == 4

    def test_scan_when_trailing_backslash_then_raises(self):
        with pytest.raises(MarkerSyntaxError, match=ERR_UNTERMINATED):
            scan("abc\\")

    def test_scan_when_error_then_earlier_tokens_still_yielded(self):
        scanner = TokenScanner("a 'b")
        assert next(scanner).text == "a"
        with pytest.raises(MarkerSyntaxError):
            next(scanner)

    def test_iter_when_consumed_then_second_pass_empty(self):
        scanner = TokenScanner("a b")
        assert len(list(scanner)) == 2
        assert list(scanner) == []


class TestUnescape:
    """Tests for unescape()."""

    def test_unescape_when_mixed_quotes_then_inner_quote_kept(self):
        assert unescape("\"it's\"") == "it's"

    def test_unescape_when_escaped_backslash_then_single_backslash(self):
        assert unescape("a\\\\b") == "a\\b"
