"""LightRAG Upload Hook.

Ponto de entrada chamado pelo host (LibreChat) a cada arquivo recebido,
seja em memória ou já salvo em disco. Espelha o arquivo no LightRAG e
nunca quebra o fluxo de upload do host: qualquer falha vira None.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from .config import ForwardingTarget, get_lightrag_config, resolve_target
from .forwarding_client import LightRAGForwardingClient
from .models import FileSubmission, ForwardingResult
from .multipart import encode_multipart
from .validators import DEFAULT_MIME_TYPE

logger = logging.getLogger(__name__)


def _default_client() -> LightRAGForwardingClient:
    return LightRAGForwardingClient(timeout=get_lightrag_config().timeout)


async def _forward_submission(
    submission: FileSubmission,
    target: ForwardingTarget | None,
    client: LightRAGForwardingClient | None,
) -> ForwardingResult:
    target = target or resolve_target(None, get_lightrag_config())
    client = client or _default_client()

    encoded = encode_multipart(submission)
    return await client.forward(target, encoded, submission.file_name)


async def send_file_to_lightrag(
    buffer: bytes,
    file_name: str,
    mime_type: str,
    submitter_id: str | None = None,
    *,
    endpoint: str | None = None,
    target: ForwardingTarget | None = None,
    client: LightRAGForwardingClient | None = None,
) -> ForwardingResult:
    """Envia um arquivo em memória para o LightRAG.

    Args:
        buffer: Bytes do arquivo
        file_name: Nome original do arquivo
        mime_type: MIME type declarado
        submitter_id: ID do usuário (default: "unknown")
        endpoint: Origem do upload (apenas para logs)
        target: URL do LightRAG (default: config do deployment)
        client: Cliente de forwarding (default: novo cliente)

    Returns:
        Resposta JSON do LightRAG ou None em qualquer falha
    """
    try:
        submission = FileSubmission.from_buffer(
            buffer, file_name, mime_type, submitter_id, endpoint=endpoint
        )
        logger.info(f"Starting file upload to LightRAG: {submission.log_details()}")
        return await _forward_submission(submission, target, client)
    except Exception as e:
        logger.error(
            f"Unexpected error sending {file_name} to LightRAG: {e}", exc_info=True
        )
        return None


async def send_file_to_lightrag_from_path(
    file_path: str | Path,
    file_name: str | None = None,
    mime_type: str | None = None,
    submitter_id: str | None = None,
    *,
    target: ForwardingTarget | None = None,
    client: LightRAGForwardingClient | None = None,
) -> ForwardingResult:
    """Envia para o LightRAG um arquivo já gravado em disco pelo host.

    Se o arquivo não existir, loga e retorna None sem chamada de rede.

    Args:
        file_path: Caminho do arquivo
        file_name: Nome exibido (default: nome do arquivo no path)
        mime_type: MIME type (default: adivinhado pela extensão)
        submitter_id: ID do usuário (default: "unknown")
        target: URL do LightRAG (default: config do deployment)
        client: Cliente de forwarding (default: novo cliente)

    Returns:
        Resposta JSON do LightRAG ou None
    """
    try:
        path = Path(file_path)
        if not path.is_file():
            logger.warning(f"File not found at path: {path}")
            return None

        file_name = file_name or path.name
        mime_type = mime_type or mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE

        try:
            buffer = path.read_bytes()
        except OSError as e:
            logger.error(f"Could not read {path} for LightRAG upload: {e}")
            return None

        logger.info(f"File size: {len(buffer)} bytes ({path})")

        submission = FileSubmission.from_buffer(
            buffer, file_name, mime_type, submitter_id, endpoint="path"
        )
        logger.info(f"Starting file upload to LightRAG from path: {submission.log_details()}")
        return await _forward_submission(submission, target, client)
    except Exception as e:
        logger.error(
            f"Unexpected error sending {file_path} to LightRAG: {e}", exc_info=True
        )
        return None
