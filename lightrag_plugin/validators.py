"""Validation utilities"""
import re

# type/subtype com parâmetros opcionais (RFC 2045 token chars)
_MIME_PATTERN = re.compile(
    r"^[A-Za-z0-9!#$&^_.+-]+/[A-Za-z0-9!#$&^_.+-]+(\s*;\s*[A-Za-z0-9!#$&^_.+-]+=(\"[^\"\r\n]*\"|[A-Za-z0-9!#$&^_.+-]+))*$"
)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "upload"


def sanitize_header_filename(filename: str) -> str:
    """Escapa nome de arquivo para o header Content-Disposition.

    Mesmo escape que navegadores usam em form submission:
    aspas e quebras de linha viram percent-encoding.
    """
    if not filename:
        return DEFAULT_FILENAME
    return (
        filename.replace('"', "%22")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
    )


def is_valid_mime_type(mime_type: str) -> bool:
    """Valida MIME type (sem CR/LF, formato type/subtype)"""
    if not mime_type:
        return False
    return bool(_MIME_PATTERN.match(mime_type.strip()))


def normalize_mime_type(mime_type: str | None) -> str:
    """Retorna o MIME type ou application/octet-stream se inválido"""
    if mime_type and is_valid_mime_type(mime_type):
        return mime_type.strip()
    return DEFAULT_MIME_TYPE


def validate_document_id(document_id: str) -> bool:
    """Valida ID de documento antes de montar a URL remota"""
    if not document_id or not document_id.strip():
        return False
    if "/" in document_id or "\\" in document_id or "\0" in document_id:
        return False
    # "." e ".." são normalizados pelo httpx e mudam o path remoto
    if document_id.strip() in (".", ".."):
        return False
    return len(document_id) < 256
