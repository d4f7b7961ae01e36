"""Tests for JSON submissions with base64 attachments."""

import base64

import orjson
import pytest

from app.core.errors import EmptyBody, InvalidJsonBody, TooManyFiles
from app.models.multipart import DEFAULT_CONTENT_TYPE
from app.multipart.json_form import parse_json_form, read_json_form, render_value


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


class TestParseJsonForm:
    """Tests for parse_json_form()."""

    def test_fields_rendered_as_text(self) -> None:
        """Verify scalar members become text fields and nulls are dropped."""
        body = orjson.dumps({"firstName": "Ada", "terms": True, "gpa": 3.9, "duration": 12, "skip": None})

        form = parse_json_form(body)

        assert form.fields == {"firstName": "Ada", "terms": "true", "gpa": "3.9", "duration": "12"}
        assert form.files == []

    def test_attachments_decoded(self) -> None:
        """Verify base64 attachments become FileRecords."""
        pdf = b"%PDF-1.7\x00\xff"
        body = orjson.dumps(
            {
                "firstName": "Ada",
                "files": [
                    {"name": "resume", "filename": "cv.pdf", "contentType": "application/pdf", "data": _b64(pdf)},
                    {"filename": "notes.txt", "data": _b64(b"hi")},
                ],
            }
        )

        form = parse_json_form(body)

        first, second = form.files
        assert (first.name, first.filename, first.content_type, first.body) == ("resume", "cv.pdf", "application/pdf", pdf)
        assert (second.name, second.content_type, second.body) == ("files", DEFAULT_CONTENT_TYPE, b"hi")
        assert "files" not in form.fields

    def test_data_url_accepted(self) -> None:
        """Verify data: URLs are stripped to their base64 payload."""
        body = orjson.dumps({"files": [{"filename": "a.png", "data": f"data:image/png;base64,{_b64(b'PNG')}"}]})

        form = parse_json_form(body)

        assert form.files[0].body == b"PNG"

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'"text"'])
    def test_invalid_body(self, body: bytes) -> None:
        """Verify non-object or malformed JSON is rejected."""
        with pytest.raises(InvalidJsonBody):
            parse_json_form(body)

    @pytest.mark.parametrize(
        "attachment",
        [
            {"filename": "a.txt", "data": "abc"},
            {"filename": "", "data": _b64(b"x")},
            {"data": _b64(b"x")},
            "not an object",
        ],
    )
    def test_invalid_attachment(self, attachment) -> None:
        """Verify a bad attachment rejects the whole body."""
        with pytest.raises(InvalidJsonBody):
            parse_json_form(orjson.dumps({"files": [attachment]}))

    def test_too_many_files(self) -> None:
        """Verify the file count limit applies to attachments."""
        files = [{"filename": f"{index}.txt", "data": _b64(b"x")} for index in range(3)]

        with pytest.raises(TooManyFiles):
            parse_json_form(orjson.dumps({"files": files}), max_files=2)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, "true"), (False, "false"), ("x", "x"), (7, "7"), (1.5, "1.5"), ([1, "a"], '[1,"a"]'), ({"k": 1}, '{"k":1}')],
)
def test_render_value(value, expected: str) -> None:
    """Verify JSON members are rendered like form values."""
    assert render_value(value) == expected


async def test_read_json_form_collects_stream(stream_of) -> None:
    """Verify the stream is collected before parsing."""
    form = await read_json_form(stream_of(b'{"first', b'Name": "Ada"}'))

    assert form.fields == {"firstName": "Ada"}


async def test_read_json_form_empty(stream_of) -> None:
    """Verify an empty JSON body is request-fatal."""
    with pytest.raises(EmptyBody):
        await read_json_form(stream_of())
