"""Tests for olsearch.models -- data models, decoding, and exceptions."""

from __future__ import annotations

import json

import pytest

from olsearch.models import (
    Entry,
    OLConnectionError,
    OLError,
    OLPayloadError,
    OLProtocolError,
    OLStatusError,
    SearchEnvelope,
    decode_envelope,
)


class TestDecodeEnvelope:
    def test_full_entry(self) -> None:
        body = {
            "numFound": 1,
            "docs": [
                {"title": "The Hobbit", "author_name": ["J.R.R. Tolkien"], "first_publish_year": 1937}
            ],
        }
        envelope = decode_envelope(json.dumps(body).encode())
        assert envelope.num_found == 1
        assert envelope.entries == (
            Entry(title="The Hobbit", authors=("J.R.R. Tolkien",), first_publish_year=1937),
        )

    def test_missing_docs_decodes_to_empty(self) -> None:
        envelope = decode_envelope(b"{}")
        assert envelope.entries == ()
        assert envelope.num_found == 0

    def test_null_docs_decodes_to_empty(self) -> None:
        assert decode_envelope(b'{"docs": null}').entries == ()

    def test_unknown_fields_ignored(self) -> None:
        body = {
            "start": 0,
            "q": "tolkien",
            "offset": None,
            "docs": [
                {
                    "key": "/works/OL27482W",
                    "title": "The Hobbit",
                    "edition_count": 500,
                    "language": ["eng", "rus"],
                    "ia": ["hobbit00tolk"],
                }
            ],
        }
        envelope = decode_envelope(json.dumps(body))
        assert envelope.entries == (Entry(title="The Hobbit"),)

    def test_missing_optional_fields_are_absent(self) -> None:
        entry = decode_envelope(b'{"docs": [{"title": "Another Book"}]}').entries[0]
        assert entry is not None
        assert entry.authors is None
        assert entry.first_publish_year is None

    def test_empty_authors_distinct_from_absent(self) -> None:
        entry = decode_envelope(b'{"docs": [{"title": "T", "author_name": []}]}').entries[0]
        assert entry is not None
        assert entry.authors == ()

    def test_null_item_kept_as_placeholder(self) -> None:
        envelope = decode_envelope(b'{"docs": [null, {"title": "T"}]}')
        assert envelope.entries == (None, Entry(title="T"))

    def test_missing_title_is_absent(self) -> None:
        entry = decode_envelope(b'{"docs": [{"author_name": ["A"]}]}').entries[0]
        assert entry == Entry(authors=("A",))

    def test_accepts_decoded_dict(self) -> None:
        envelope = decode_envelope({"docs": [{"title": "T"}]})
        assert envelope.entries == (Entry(title="T"),)

    def test_unicode_preserved(self) -> None:
        body = '{"docs": [{"title": "Властелин колец", "author_name": ["Толкин"]}]}'
        entry = decode_envelope(body.encode("utf-8")).entries[0]
        assert entry == Entry(title="Властелин колец", authors=("Толкин",))

    def test_non_int_num_found_defaults_to_zero(self) -> None:
        assert decode_envelope(b'{"numFound": "many"}').num_found == 0

    def test_invalid_json(self) -> None:
        with pytest.raises(OLPayloadError, match="not valid JSON"):
            decode_envelope(b"<html>oops</html>")

    def test_top_level_not_object(self) -> None:
        with pytest.raises(OLPayloadError, match="Expected a JSON object"):
            decode_envelope(b"[1, 2, 3]")

    def test_docs_not_a_list(self) -> None:
        with pytest.raises(OLPayloadError, match="'docs' to be a list"):
            decode_envelope(b'{"docs": {"title": "T"}}')

    def test_doc_not_an_object(self) -> None:
        with pytest.raises(OLPayloadError, match=r"docs\[0\]"):
            decode_envelope(b'{"docs": ["just a string"]}')

    def test_title_wrong_type_drops_doc(self) -> None:
        envelope = decode_envelope(b'{"docs": [{"title": 42}, {"title": "Ok"}]}')
        assert envelope.entries == (None, Entry(title="Ok"))

    def test_authors_wrong_type_drops_doc(self) -> None:
        envelope = decode_envelope(b'{"docs": [{"author_name": "Tolkien"}]}')
        assert envelope.entries == (None,)

    def test_authors_with_non_string_item_drops_doc(self) -> None:
        envelope = decode_envelope(b'{"docs": [{"author_name": ["A", 1]}]}')
        assert envelope.entries == (None,)

    def test_numeric_string_year_coerced(self) -> None:
        envelope = decode_envelope(b'{"docs": [{"title": "T", "first_publish_year": "1954"}]}')
        assert envelope.entries == (Entry(title="T", first_publish_year=1954),)

    def test_non_numeric_year_drops_doc(self) -> None:
        envelope = decode_envelope(b'{"docs": [{"first_publish_year": "circa 1900"}]}')
        assert envelope.entries == (None,)

    def test_year_boolean_drops_doc(self) -> None:
        envelope = decode_envelope(b'{"docs": [{"first_publish_year": true}]}')
        assert envelope.entries == (None,)

    def test_bad_doc_does_not_hide_good_ones(self) -> None:
        raw = {
            "numFound": 3,
            "docs": [
                {"title": "First", "first_publish_year": 1937},
                {"title": ["not", "a", "string"]},
                {"title": "Third"},
            ],
        }
        envelope = decode_envelope(raw)
        assert envelope.entries[0] == Entry(title="First", first_publish_year=1937)
        assert envelope.entries[1] is None
        assert envelope.entries[2] == Entry(title="Third")

    def test_payload_error_keeps_truncated_body(self) -> None:
        with pytest.raises(OLPayloadError) as exc_info:
            decode_envelope("x" * 5000)
        assert len(exc_info.value.raw_body) == 2000


class TestModels:
    def test_entry_defaults(self) -> None:
        entry = Entry()
        assert entry.title is None
        assert entry.authors is None
        assert entry.first_publish_year is None

    def test_entry_frozen(self) -> None:
        entry = Entry(title="T")
        with pytest.raises(AttributeError):
            entry.title = "other"  # type: ignore[misc]

    def test_entry_structural_equality(self) -> None:
        assert Entry(title="T", authors=("A",)) == Entry(title="T", authors=("A",))

    def test_envelope_defaults(self) -> None:
        envelope = SearchEnvelope()
        assert envelope.entries == ()
        assert envelope.num_found == 0


class TestExceptions:
    def test_hierarchy(self) -> None:
        assert issubclass(OLConnectionError, OLError)
        assert issubclass(OLProtocolError, OLError)
        assert issubclass(OLStatusError, OLProtocolError)
        assert issubclass(OLPayloadError, OLProtocolError)
        assert not issubclass(OLConnectionError, OLProtocolError)

    def test_status_error_keeps_code(self) -> None:
        exc = OLStatusError(404, "Not Found")
        assert exc.status_code == 404
        assert exc.detail == "Not Found"
        assert "HTTP 404" in str(exc)

    def test_status_error_without_detail(self) -> None:
        assert str(OLStatusError(500)) == "HTTP 500"
