"""Modelos do plugin LightRAG."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field

UNKNOWN_SUBMITTER = "unknown"

# Resultado do forwarding: payload JSON do LightRAG ou None (falha)
ForwardingResult = dict[str, Any] | None


@dataclass(frozen=True)
class FileSubmission:
    """Arquivo a ser enviado ao LightRAG (imutável, escopo de request)."""

    raw_bytes: bytes
    file_name: str
    mime_type: str
    submitter_id: str = UNKNOWN_SUBMITTER
    endpoint: str | None = None
    size_bytes: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "raw_bytes", bytes(self.raw_bytes))
        object.__setattr__(self, "size_bytes", len(self.raw_bytes))
        if not self.submitter_id:
            object.__setattr__(self, "submitter_id", UNKNOWN_SUBMITTER)

    @classmethod
    def from_buffer(
        cls,
        buffer: bytes | bytearray | memoryview,
        file_name: str,
        mime_type: str,
        submitter_id: str | None = None,
        endpoint: str | None = None,
    ) -> "FileSubmission":
        return cls(
            raw_bytes=bytes(buffer),
            file_name=file_name,
            mime_type=mime_type,
            submitter_id=submitter_id or UNKNOWN_SUBMITTER,
            endpoint=endpoint,
        )

    def log_details(self) -> dict[str, Any]:
        return {
            "filename": self.file_name,
            "size": self.size_bytes,
            "mimetype": self.mime_type,
            "user_id": self.submitter_id,
            "endpoint": self.endpoint,
        }


@dataclass(frozen=True)
class EncodedMultipart:
    """Body multipart/form-data pronto para envio."""

    body: bytes
    boundary: str
    content_length: int

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"


class ResponseEnvelope(BaseModel):
    """Envelope padrão das respostas das rotas."""

    status: Literal["success", "error"]
    message: str | None = None
    data: Any = None


class DocumentsEnvelope(ResponseEnvelope):
    documents: list[Any] = Field(default_factory=list)


class SearchEnvelope(ResponseEnvelope):
    answer: str | None = None


class SearchRequest(BaseModel):
    """Body do POST /search."""

    query: str = Field(..., description="Pergunta em linguagem natural")


class UserContext(BaseModel):
    """Usuário anexado pelo host em request.state.user."""

    id: str | None = None
    plugins: dict[str, Any] = Field(default_factory=dict)
