"""
Unit Tests for the Go Symbol Extractor

Tests for GoSymbolExtractor lookups over files and directories, doc
comments, grouped declarations and error reporting.
"""

import pytest

pytest.importorskip("tree_sitter_language_pack")

from pullquote.core.errors import SymbolNotFoundError, SymbolParseError
from pullquote.core.models import Format, Marker, MarkerKind
from pullquote.resolving import GoSymbolExtractor, resolve_markers

SAMPLE_GO = """package sample

import "fmt"

// Greeting is printed by Hello.
const Greeting = "hi"

// Colors are the known colors.
const (
	// Red is red.
	Red = iota
	Blue
)

// Hello says hello.
func Hello() {
	fmt.Println(Greeting)
}

type Thing struct{}

// Name returns the name.
func (t *Thing) Name() string {
	return "thing"
}

func Shared() string {
	local := "value"
	return local
}

func ExampleHello() {
	Hello()
	// Output:
	// hi
}
"""

SAMPLE_TEST_GO = """package sample

func Shared() string { return "from test" }
"""


@pytest.fixture
def go_dir(write_files):
    return write_files({"sample.go": SAMPLE_GO, "a_test.go": SAMPLE_TEST_GO})


class TestGoSymbolExtractor:
    """Tests for GoSymbolExtractor.extract()."""

    # ─────────────────────────────────────────────────────────────────────────
    # Functions and methods
    # ─────────────────────────────────────────────────────────────────────────

    def test_extract_when_function_then_includes_doc_comment(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Hello")
        assert found.text == "// Hello says hello.\nfunc Hello() {\n\tfmt.Println(Greeting)\n}"
        assert found.doc == "// Hello says hello."

    def test_extract_when_type_dot_method_then_method(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Thing.Name")
        assert found.text.startswith("// Name returns the name.\nfunc (t *Thing) Name() string {")

    def test_extract_when_plain_method_name_then_method(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Name")
        assert "func (t *Thing) Name()" in found.text

    def test_extract_when_wrong_receiver_then_not_found(self, go_dir):
        with pytest.raises(SymbolNotFoundError):
            GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Other.Name")

    def test_extract_when_short_var_then_statement_without_doc(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "local")
        assert found.text == 'local := "value"'
        assert found.doc is None

    # ─────────────────────────────────────────────────────────────────────────
    # Const, var and type declarations
    # ─────────────────────────────────────────────────────────────────────────

    def test_extract_when_ungrouped_const_then_whole_declaration(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Greeting")
        assert found.text == '// Greeting is printed by Hello.\nconst Greeting = "hi"'

    def test_extract_when_grouped_const_then_only_spec(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Red")
        assert "Red = iota" in found.text
        assert "Blue" not in found.text
        assert "const (" not in found.text

    def test_extract_when_include_group_then_whole_group(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Red", include_group=True)
        assert found.text.startswith("// Colors are the known colors.\nconst (")
        assert "Blue" in found.text

    def test_extract_when_type_then_type_declaration(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Thing")
        assert found.text == "type Thing struct{}"

    # ─────────────────────────────────────────────────────────────────────────
    # Locations
    # ─────────────────────────────────────────────────────────────────────────

    def test_extract_when_directory_then_non_test_files_first(self, go_dir):
        found = GoSymbolExtractor().extract(str(go_dir), "Shared")
        assert "local" in found.text

    def test_extract_when_missing_symbol_then_not_found_error(self, go_dir):
        with pytest.raises(SymbolNotFoundError) as exc:
            GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Nope")
        assert str(exc.value) == f'error within {go_dir / "sample.go"}: couldn\'t find "Nope"'

    def test_extract_when_syntax_error_then_parse_error(self, write_files):
        root = write_files({"broken.go": "package broken\n\nfunc ( {\n"})
        with pytest.raises(SymbolParseError):
            GoSymbolExtractor().extract(str(root / "broken.go"), "Any")

    def test_extract_when_grammar_unavailable_then_parse_error(self, go_dir, monkeypatch):
        import pullquote.resolving.go as go_module

        def no_grammar(language):
            raise RuntimeError(f"cannot download {language} grammar")

        monkeypatch.setattr(go_module, "get_parser", no_grammar)
        with pytest.raises(SymbolParseError, match="cannot download go grammar"):
            GoSymbolExtractor().extract(str(go_dir / "sample.go"), "Hello")

    def test_extract_when_go_command_missing_then_not_found_error(self, tmp_path):
        extractor = GoSymbolExtractor(go_command=str(tmp_path / "no-such-go"))
        with pytest.raises(SymbolNotFoundError, match="unable to run"):
            extractor.extract("example.com/nothing/here", "Foo")


class TestResolveGoMarkers:
    """Tests for go markers through resolve_markers()."""

    def _marker(self, object_path: str, fmt: Format) -> Marker:
        return Marker(
            kind=MarkerKind.GO,
            open_offset=0,
            content_start=5,
            object_path=object_path,
            format=fmt,
            language="go",
        )

    def test_resolve_when_example_format_then_code_and_output_parts(self, go_dir):
        [content] = resolve_markers([self._marker(f"{go_dir / 'sample.go'}#ExampleHello", Format.EXAMPLE)])
        assert content.parts == ("Hello()", "hi")

    def test_resolve_when_example_format_without_output_then_plain_text(self, go_dir):
        [content] = resolve_markers([self._marker(f"{go_dir / 'sample.go'}#Hello", Format.EXAMPLE)])
        assert content.parts is None
        assert content.text.startswith("// Hello says hello.")
