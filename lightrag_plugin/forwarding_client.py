"""Cliente de forwarding de uploads para o LightRAG proxy.

Nunca propaga erro para quem chama: qualquer falha (status não-2xx,
erro de rede, timeout, body inválido) é logada e resolvida como None.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .config import DEFAULT_TIMEOUT, ForwardingTarget
from .constants import LOG_BODY_LIMIT, UPLOAD_PATH
from .models import EncodedMultipart, ForwardingResult

logger = logging.getLogger(__name__)


class LightRAGForwardingClient:
    """Envia um body multipart já codificado para /v1/files/upload."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Inicializa cliente.

        Args:
            timeout: Tempo máximo da requisição em segundos
            transport: Transport httpx alternativo (usado nos testes)
        """
        self.timeout = timeout
        self._transport = transport

    async def forward(
        self,
        target: ForwardingTarget,
        encoded: EncodedMultipart,
        file_name: str,
        path: str = UPLOAD_PATH,
    ) -> ForwardingResult:
        """Envia o upload e retorna o JSON de resposta ou None.

        Args:
            target: URL base do LightRAG proxy
            encoded: Body multipart (ver encode_multipart)
            file_name: Nome do arquivo (apenas para logs)
            path: Sub-path remoto

        Returns:
            Payload JSON parseado ou None em qualquer falha
        """
        url = target.url_for(path)
        headers = {
            "Content-Type": encoded.content_type,
            "Content-Length": str(encoded.content_length),
        }

        logger.info(f"Sending {file_name} to LightRAG proxy: {url}")
        logger.debug(
            f"Request built: url={url} content_length={encoded.content_length} "
            f"timeout={self.timeout}s"
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                # timeout do httpx vale por fase; wait_for limita o request inteiro
                response = await asyncio.wait_for(
                    client.post(url, content=encoded.body, headers=headers),
                    timeout=self.timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.error(
                f"Timeout sending {file_name} to LightRAG after {self.timeout}s ({url})"
            )
            return None
        except httpx.HTTPError as e:
            logger.error(
                f"Network error sending {file_name} to LightRAG ({url}): "
                f"{type(e).__name__}: {e}"
            )
            return None
        except Exception as e:
            logger.error(
                f"Unexpected error sending {file_name} to LightRAG ({url}): {e}",
                exc_info=True,
            )
            return None

        logger.info(
            f"LightRAG response received for {file_name}: "
            f"{response.status_code} {response.reason_phrase}"
        )

        if not response.is_success:
            logger.error(
                f"LightRAG upload failed for {file_name}: status={response.status_code} "
                f"body={response.text[:LOG_BODY_LIMIT]}"
            )
            return None

        try:
            result = response.json()
        except ValueError as e:
            logger.error(
                f"Error parsing LightRAG response for {file_name}: {e} "
                f"raw={response.text[:LOG_BODY_LIMIT]}"
            )
            return None

        if not isinstance(result, dict):
            logger.error(
                f"Unexpected LightRAG response for {file_name}: "
                f"{type(result).__name__} instead of object"
            )
            return None

        logger.info(
            f"File sent to LightRAG successfully: {file_name} "
            f"(track_id={result.get('track_id')}, status={result.get('status')})"
        )
        return result
