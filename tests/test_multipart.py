"""
Unit tests for the manual multipart/form-data encoder.
"""
import hashlib

import httpx
import pytest

from lightrag_plugin.models import FileSubmission
from lightrag_plugin.multipart import BOUNDARY_PREFIX, encode_multipart, generate_boundary


def make_submission(raw=b"hello world", name="a.txt", mime="text/plain"):
    return FileSubmission.from_buffer(raw, name, mime, "user-1")


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"0123456789",
        bytes(range(256)) * 4,
        b"line one\r\nline two\r\n--not-a-boundary\r\n",
    ],
)
def test_content_length_matches_body(raw):
    encoded = encode_multipart(make_submission(raw=raw))

    assert encoded.content_length == len(encoded.body)


def test_content_length_counts_utf8_filename_bytes():
    encoded = encode_multipart(make_submission(name="relatório-ção.txt"))

    assert encoded.content_length == len(encoded.body)
    assert "relatório-ção.txt".encode("utf-8") in encoded.body


def test_body_layout():
    raw = b"\x00\xffbinary\r\n"
    encoded = encode_multipart(make_submission(raw=raw), boundary="XYZ")

    expected = (
        b"--XYZ\r\n"
        b'Content-Disposition: form-data; name="file"; filename="a.txt"\r\n'
        b"Content-Type: text/plain\r\n"
        b"\r\n"
        + raw
        + b"\r\n--XYZ--\r\n"
    )
    assert encoded.body == expected
    assert encoded.content_type == "multipart/form-data; boundary=XYZ"


def test_boundary_has_prefix_and_random_suffix():
    first = generate_boundary()
    second = generate_boundary()

    assert first.startswith(BOUNDARY_PREFIX)
    assert len(first) > len(BOUNDARY_PREFIX)
    assert first != second


def test_filename_quotes_and_newlines_are_escaped():
    encoded = encode_multipart(make_submission(name='evil".txt\r\nX-Injected: 1'), boundary="B")

    header = encoded.body.split(b"\r\n\r\n", 1)[0]
    assert b'filename="evil%22.txt%0D%0AX-Injected: 1"' in header
    assert b"\r\nX-Injected" not in header


def test_invalid_mime_type_falls_back_to_octet_stream():
    encoded = encode_multipart(make_submission(mime="text/plain\r\nX-Injected: 1"), boundary="B")

    assert b"Content-Type: application/octet-stream\r\n" in encoded.body
    assert b"X-Injected" not in encoded.body


def test_mime_type_with_parameters_is_kept():
    encoded = encode_multipart(make_submission(mime="text/plain; charset=utf-8"), boundary="B")

    assert b"Content-Type: text/plain; charset=utf-8\r\n" in encoded.body


def test_empty_filename_gets_placeholder():
    encoded = encode_multipart(make_submission(name=""), boundary="B")

    assert b'filename="upload"' in encoded.body


@pytest.mark.asyncio
async def test_standard_parser_recovers_file(echo_transport):
    """Starlette's multipart parser reads back identical bytes and metadata."""
    raw = bytes(range(256)) + b"\r\n--tail\r\n"
    submission = make_submission(raw=raw, name="dados.bin", mime="application/pdf")
    encoded = encode_multipart(submission)

    async with httpx.AsyncClient(transport=echo_transport) as client:
        response = await client.post(
            "http://stub/v1/files/upload",
            content=encoded.body,
            headers={
                "Content-Type": encoded.content_type,
                "Content-Length": str(encoded.content_length),
            },
        )

    assert response.status_code == 201
    data = response.json()
    assert data["size"] == len(raw)
    assert data["sha256"] == hashlib.sha256(raw).hexdigest()
    assert data["filename"] == "dados.bin"
    assert data["content_type"] == "application/pdf"


def test_submission_is_immutable():
    submission = make_submission()

    assert submission.size_bytes == len(b"hello world")
    with pytest.raises(AttributeError):
        submission.file_name = "other.txt"


def test_submission_defaults_to_unknown_submitter():
    submission = FileSubmission.from_buffer(b"x", "a.txt", "text/plain")

    assert submission.submitter_id == "unknown"
