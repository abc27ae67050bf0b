"""
Conformance Tests

Shared test vectors plus the behavioural guarantees of the format engine.
Covers: load/store round-trips, codec inverse law, in-place replacement,
append semantics, comment round-trips, raw/decoded distinctness and line
continuation.
"""

import io
import json
from pathlib import Path

import pytest

from fprops.document import PropsDocument
from fprops.errors import PropsParseError
from fprops.reader import PropsReader
from fprops.syntax import escape, unescape
from fprops.tokens import TokenType
from fprops.writer import PropsWriter


VECTORS_PATH = Path(__file__).parent / "conformance" / "vectors.json"

@pytest.fixture(scope="module")
def vectors():
    with open(VECTORS_PATH, encoding="utf-8") as f:
        return json.load(f)


# ================================================================
# Load -> Store Round-Trip
# ================================================================

class TestRoundTrip:
    """Unmodified input must come back exactly."""

    def test_conformance_vectors(self, vectors):
        for case in vectors["roundtrip"]["cases"]:
            desc = case["desc"]
            text = case["input"]

            doc = PropsReader.load(io.StringIO(text, newline=""))
            out = io.StringIO(newline="")
            PropsWriter.store(doc, out)
            assert out.getvalue() == text, (
                f"[{desc}] store(load({text!r})) = {out.getvalue()!r}"
            )

    def test_tokens_cover_input(self, vectors):
        """Every character of the input lands in exactly one token."""
        for case in vectors["roundtrip"]["cases"]:
            tokens = PropsReader.tokenize(case["input"])
            assert "".join(t.raw for t in tokens) == case["input"], case["desc"]

    def test_records_are_triples(self, vectors):
        for case in vectors["roundtrip"]["cases"]:
            tokens = PropsReader.tokenize(case["input"])
            for i, t in enumerate(tokens):
                if t.type is TokenType.KEY:
                    assert tokens[i + 1].type is TokenType.SEPARATOR, case["desc"]
                    assert tokens[i + 2].type is TokenType.VALUE, case["desc"]

    def test_index_matches_key_tokens(self, vectors):
        for case in vectors["roundtrip"]["cases"]:
            doc = PropsReader.parse(case["input"])
            key_texts = {t.text for t in doc.tokens if t.type is TokenType.KEY}
            assert set(doc) == key_texts, case["desc"]

    def test_double_round_trip_stable(self, vectors):
        for case in vectors["roundtrip"]["cases"]:
            once = PropsReader.parse(case["input"]).to_text()
            twice = PropsReader.parse(once).to_text()
            assert once == twice == case["input"], case["desc"]


# ================================================================
# Codec
# ================================================================

class TestCodec:

    def test_conformance_vectors(self, vectors):
        for case in vectors["codec"]["cases"]:
            desc = case["desc"]
            assert escape(case["value"]) == case["raw"], f"[{desc}] value"
            assert escape(case["value"], for_key=True) == case["raw_key"], f"[{desc}] key"
            assert unescape(case["raw"]) == case["value"], f"[{desc}] unescape value"
            assert unescape(case["raw_key"]) == case["value"], f"[{desc}] unescape key"

    @pytest.mark.parametrize("value", [
        "",
        "plain",
        " leading and trailing ",
        "tabs\tand\nnewlines\r\n\f",
        "back\\slash\\\\es\\",
        "\\u0041 looks like an escape",
        "=:#! markers",
        "café ÿ Ā € ￿",
        "\U0001F600 \U00010000 \U0010FFFF",
        "mixed \\\n continuation-looking",
    ])
    @pytest.mark.parametrize("for_key", [True, False])
    def test_inverse_law(self, value, for_key):
        assert unescape(escape(value, for_key)) == value

    def test_parse_error_vectors(self, vectors):
        for case in vectors["parse_errors"]["cases"]:
            with pytest.raises(PropsParseError) as exc:
                PropsReader.parse(case["input"])
            assert exc.value.line == case["line"], case["desc"]


# ================================================================
# Mutation guarantees
# ================================================================

class TestMutationGuarantees:

    def test_in_place_replace(self):
        doc = PropsReader.parse("# about k\n# more\n   k  :  v0 \nz=1\n")
        before = doc.tokens
        doc.put("k", "v1")
        doc.put("k", "v2")
        after = doc.tokens
        value_idx = [i for i, t in enumerate(before) if t.type is TokenType.VALUE][0]
        for i, (a, b) in enumerate(zip(before, after)):
            if i != value_idx:
                assert a == b
        assert after[value_idx].text == "v2"
        assert doc["k"] == "v2"
        assert doc.get_comment("k") == ["# about k", "# more"]

    def test_append_on_non_whitespace_end(self):
        doc = PropsReader.parse("a=1")
        n = len(doc.tokens)
        doc.put("b", "2")
        added = doc.tokens[n:]
        assert [t.type for t in added] == [
            TokenType.WHITESPACE, TokenType.KEY, TokenType.SEPARATOR, TokenType.VALUE,
        ]
        assert added[0].raw == "\n"
        assert added[2].raw == "="

    def test_append_on_whitespace_end(self):
        doc = PropsReader.parse("a=1\n")
        n = len(doc.tokens)
        doc.put("b", "2")
        assert [t.type for t in doc.tokens[n:]] == [
            TokenType.KEY, TokenType.SEPARATOR, TokenType.VALUE,
        ]

    def test_append_on_empty(self):
        doc = PropsDocument()
        doc.put("b", "2")
        assert [t.type for t in doc.tokens] == [
            TokenType.KEY, TokenType.SEPARATOR, TokenType.VALUE,
        ]

    def test_comment_round_trip(self):
        doc = PropsReader.parse("k=v\n")
        doc.set_comment("k", ["# a", "# b"])
        assert doc.get_comment("k") == ["# a", "# b"]

    def test_comment_shrink_and_grow(self):
        doc = PropsReader.parse("# 1\n# 2\n# 3\nk=v\n")
        assert doc.set_comment("k", ["# a"]) == ["# 1", "# 2", "# 3"]
        assert doc.to_text() == "# a\nk=v\n"
        assert doc.set_comment("k", ["# a", "# b", "# c"]) == ["# a"]
        assert doc.to_text() == "# a\n# b\n# c\nk=v\n"

    def test_raw_decoded_distinctness(self):
        doc = PropsReader.parse("a\\ b=1\na\\u0020b=2\n")
        assert doc.raw_keys() == ["a\\ b", "a\\u0020b"]
        assert list(doc) == ["a b"]
        assert doc.get("a b") == "2"
        assert doc.raw_values() == ["1", "2"]

    def test_continuation(self):
        text = "key=line1\\\nline2"
        doc = PropsReader.parse(text)
        assert doc["key"] == "line1line2"
        assert doc.to_text() == text

    def test_scenario(self):
        doc = PropsReader.load(io.StringIO("# title\nname=Alice\n"))
        assert doc.get("name") == "Alice"
        assert doc.get_comment("name") == ["# title"]
        doc.put("name", "Bob")
        out = io.StringIO()
        doc.store(out)
        assert out.getvalue() == "# title\nname=Bob\n"

    def test_mutated_document_reparses_to_same_mapping(self):
        doc = PropsReader.parse("# c\na = 1\nb:2\n\n! x\nc 3\n")
        doc.put("a", "new value")
        doc.put("d e", "€\n")
        doc.remove("b")
        doc.set_comment("c", ["changed", "twice"])
        reparsed = PropsReader.parse(doc.to_text())
        assert reparsed.as_dict() == doc.as_dict()
        assert reparsed.get_comment("c") == ["! changed", "! twice"]
