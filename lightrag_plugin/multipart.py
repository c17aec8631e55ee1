"""Encoder multipart/form-data manual (sem biblioteca de formulários).

Monta o body byte a byte: header do campo, bytes crus do arquivo e
footer com o boundary de fechamento. O Content-Length é calculado sobre
o buffer final.
"""

from __future__ import annotations

import secrets

from .models import EncodedMultipart, FileSubmission
from .validators import normalize_mime_type, sanitize_header_filename

BOUNDARY_PREFIX = "----formdata-librechat-"
CRLF = "\r\n"
DEFAULT_FIELD_NAME = "file"


def generate_boundary(prefix: str = BOUNDARY_PREFIX) -> str:
    """Gera boundary com sufixo aleatório."""
    return prefix + secrets.token_hex(12)


def encode_multipart(
    submission: FileSubmission,
    field_name: str = DEFAULT_FIELD_NAME,
    boundary: str | None = None,
) -> EncodedMultipart:
    """Codifica um único arquivo como multipart/form-data.

    Args:
        submission: Arquivo e metadados
        field_name: Nome do campo do formulário
        boundary: Boundary fixo (default: gerado aleatoriamente)

    Returns:
        EncodedMultipart com body, boundary e content_length
    """
    boundary = boundary or generate_boundary()
    filename = sanitize_header_filename(submission.file_name)
    mime_type = normalize_mime_type(submission.mime_type)

    header = (
        f"--{boundary}{CRLF}"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{filename}"{CRLF}'
        f"Content-Type: {mime_type}{CRLF}"
        f"{CRLF}"
    ).encode("utf-8")
    footer = f"{CRLF}--{boundary}--{CRLF}".encode("utf-8")

    body = b"".join((header, submission.raw_bytes, footer))

    return EncodedMultipart(body=body, boundary=boundary, content_length=len(body))
