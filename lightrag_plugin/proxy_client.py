"""Cliente para a API REST do LightRAG proxy."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from .config import DEFAULT_MODEL, DEFAULT_TIMEOUT, ForwardingTarget
from .constants import (
    CHAT_COMPLETIONS_PATH,
    DOCUMENTS_PATH,
    LOG_BODY_LIMIT,
    UPLOAD_PATH,
)
from .models import FileSubmission
from .multipart import encode_multipart

logger = logging.getLogger(__name__)


class LightRAGProxyError(Exception):
    """Falha de transporte (rede, DNS, timeout) ao falar com o proxy."""

    def __init__(self, message: str, url: str, cause: Exception | None = None):
        super().__init__(message)
        self.url = url
        self.cause = cause


@dataclass
class ProxyResponse:
    """Status e payload de uma resposta do LightRAG proxy."""

    status_code: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def remote_message(self, default: str = "Unknown error") -> str:
        message = self.payload.get("message") or self.payload.get("detail")
        return str(message) if message else default


def _parse_payload(response: httpx.Response) -> dict[str, Any]:
    """Parseia o body; respostas não-JSON viram {"message": texto}."""
    try:
        payload = response.json()
    except ValueError:
        text = response.text[:LOG_BODY_LIMIT]
        logger.warning(
            f"Non-JSON response from LightRAG ({response.status_code}): {text}"
        )
        return {"message": text} if text else {}

    if isinstance(payload, dict):
        return payload
    return {"data": payload}


class LightRAGProxyClient:
    """Cliente HTTP para o LightRAG proxy.

    Endpoints usados:
        POST   /v1/files/upload
        GET    /v1/documents
        DELETE /v1/documents/{id}
        POST   /v1/chat/completions
    """

    def __init__(
        self,
        target: ForwardingTarget,
        timeout: float = DEFAULT_TIMEOUT,
        model: str = DEFAULT_MODEL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Inicializa cliente LightRAG.

        Args:
            target: URL base do LightRAG proxy
            timeout: Timeout para requisições HTTP
            model: Identificador do modelo para chat completions
            transport: Transport httpx alternativo (usado nos testes)
        """
        self.target = target
        self.timeout = timeout
        self.model = model
        self._transport = transport

        self.headers = {"Content-Type": "application/json"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> ProxyResponse:
        url = self.target.url_for(path)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await asyncio.wait_for(
                    client.request(method, url, **kwargs), timeout=self.timeout
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"Timeout on {method} {url} after {self.timeout}s")
            raise LightRAGProxyError(f"Timeout contacting {url}", url, e) from e
        except httpx.HTTPError as e:
            logger.error(f"Erro ao chamar LightRAG ({method} {url}): {type(e).__name__}: {e}")
            raise LightRAGProxyError(f"Error contacting {url}: {e}", url, e) from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return ProxyResponse(status_code=response.status_code, payload=_parse_payload(response))

    async def upload_file(self, submission: FileSubmission) -> ProxyResponse:
        """Envia arquivo para indexação.

        Args:
            submission: Arquivo e metadados

        Returns:
            Resposta do proxy (track_id, status, message)
        """
        encoded = encode_multipart(submission)
        headers = {
            "Content-Type": encoded.content_type,
            "Content-Length": str(encoded.content_length),
        }
        result = await self._request("POST", UPLOAD_PATH, content=encoded.body, headers=headers)
        logger.info(
            f"Upload {submission.file_name} ({submission.size_bytes} bytes) -> {result.status_code}"
        )
        return result

    async def list_documents(self) -> ProxyResponse:
        """Lista documentos indexados."""
        return await self._request("GET", DOCUMENTS_PATH, headers=self.headers)

    async def delete_document(self, document_id: str) -> ProxyResponse:
        """Remove um documento pelo ID."""
        path = f"{DOCUMENTS_PATH}/{quote(document_id, safe='')}"
        return await self._request("DELETE", path, headers=self.headers)

    async def chat_completion(self, query: str) -> ProxyResponse:
        """Faz uma pergunta à base de conhecimento (formato OpenAI chat).

        Args:
            query: Pergunta do usuário

        Returns:
            Resposta no formato chat completion
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": query}],
        }
        return await self._request(
            "POST", CHAT_COMPLETIONS_PATH, json=payload, headers=self.headers
        )


def extract_answer(payload: dict[str, Any], default: str = "No answer found") -> str:
    """Extrai choices[0].message.content de uma resposta chat completion.

    Content em lista (partes {"type": "text", "text": ...}) é concatenado;
    qualquer outro formato inesperado cai no default.
    """
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return default
    message = choices[0].get("message")
    content = message.get("content") if isinstance(message, dict) else None

    if isinstance(content, list):
        parts = [
            part.get("text")
            for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        content = "".join(parts)

    if isinstance(content, str) and content:
        return content
    return default
