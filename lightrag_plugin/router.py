"""Router LightRAG - Proxy entre o LibreChat e o LightRAG proxy."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import ForwardingTarget, LightRAGConfig, get_lightrag_config, resolve_target
from .constants import SERVICE_NAME
from .forwarding_client import LightRAGForwardingClient
from .models import (
    DocumentsEnvelope,
    FileSubmission,
    ResponseEnvelope,
    SearchEnvelope,
    SearchRequest,
    UserContext,
)
from .proxy_client import LightRAGProxyClient, LightRAGProxyError, extract_answer
from .upload_hook import send_file_to_lightrag
from .validators import validate_document_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lightrag", tags=["LightRAG"])

HOOK_ENDPOINT = "LightRAG Plugin"


# =============================================================================
# DEPENDENCIES
# =============================================================================


def get_config() -> LightRAGConfig:
    """Dependency: Configuração do deployment."""
    return get_lightrag_config()


def get_transport() -> httpx.AsyncBaseTransport | None:
    """Dependency: Transport httpx (None = rede real)."""
    return None


def get_user_context(request: Request) -> UserContext:
    """Dependency: Usuário anexado pelo middleware de auth do host."""
    user = getattr(request.state, "user", None)
    if user is None:
        return UserContext()
    if isinstance(user, UserContext):
        return user

    if isinstance(user, dict):
        user_id = user.get("id") or user.get("_id")
        plugins = user.get("plugins")
    else:
        user_id = getattr(user, "id", None)
        plugins = getattr(user, "plugins", None)

    return UserContext(
        id=str(user_id) if user_id else None,
        plugins=plugins if isinstance(plugins, dict) else {},
    )


def get_target(
    user: UserContext = Depends(get_user_context),
    config: LightRAGConfig = Depends(get_config),
) -> ForwardingTarget:
    """Dependency: URL do LightRAG resolvida para este request."""
    return resolve_target(user.plugins, config)


def get_proxy_client(
    target: ForwardingTarget = Depends(get_target),
    config: LightRAGConfig = Depends(get_config),
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
) -> LightRAGProxyClient:
    """Dependency: Cliente do LightRAG proxy."""
    return LightRAGProxyClient(
        target=target, timeout=config.timeout, model=config.model, transport=transport
    )


# =============================================================================
# HELPERS
# =============================================================================


def _envelope_response(envelope: ResponseEnvelope, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


def _error(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return _envelope_response(
        ResponseEnvelope(status="error", message=message, data=data), status_code
    )


def _unreachable(action: str) -> JSONResponse:
    return _error(500, f"Failed to reach LightRAG service while {action}")


def _internal_error(action: str) -> JSONResponse:
    return _error(500, f"Internal server error while {action}")


async def mirror_upload_to_hook(
    buffer: bytes,
    file_name: str,
    mime_type: str,
    user_id: str | None,
    target: ForwardingTarget,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Background task: chama o upload hook e apenas loga o resultado."""
    result = await send_file_to_lightrag(
        buffer,
        file_name,
        mime_type,
        user_id,
        endpoint=HOOK_ENDPOINT,
        target=target,
        client=LightRAGForwardingClient(timeout=timeout, transport=transport),
    )
    if result is None:
        logger.warning(f"Upload hook failed for {file_name} (ignored)")
    else:
        logger.info(f"Upload hook finished for {file_name}: track_id={result.get('track_id')}")


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/upload")
async def upload_file(
    background_tasks: BackgroundTasks,
    file: UploadFile | None = File(None),
    user: UserContext = Depends(get_user_context),
    config: LightRAGConfig = Depends(get_config),
    target: ForwardingTarget = Depends(get_target),
    transport: httpx.AsyncBaseTransport | None = Depends(get_transport),
    proxy: LightRAGProxyClient = Depends(get_proxy_client),
):
    """Upload de arquivo para o LightRAG.

    Depois do upload direto, o upload hook é disparado em background;
    o resultado dele só aparece nos logs.
    """
    if file is None or not file.filename:
        logger.warning("Upload request without file")
        return _error(400, "No file provided")

    try:
        content = await file.read(config.max_upload_bytes + 1)
        if len(content) > config.max_upload_bytes:
            logger.warning(
                f"Upload rejected: {file.filename} exceeds {config.max_upload_bytes} bytes"
            )
            return _error(
                413, f"File too large (limit: {config.max_upload_bytes // (1024 * 1024)}MB)"
            )

        mime_type = file.content_type or "application/octet-stream"
        submission = FileSubmission.from_buffer(content, file.filename, mime_type, user.id)
        logger.info(f"Uploading file {submission.file_name} ({submission.size_bytes} bytes)")

        result = await proxy.upload_file(submission)

        if not result.ok:
            logger.error(f"Upload failed for {submission.file_name}: {result.payload}")
            return _error(
                result.status_code,
                f"Failed to upload file to LightRAG: {result.remote_message()}",
                result.payload,
            )

        logger.info(f"File uploaded successfully: {submission.file_name}")
        background_tasks.add_task(
            mirror_upload_to_hook,
            buffer=submission.raw_bytes,
            file_name=submission.file_name,
            mime_type=submission.mime_type,
            user_id=user.id,
            target=target,
            timeout=config.timeout,
            transport=transport,
        )

        return _envelope_response(
            ResponseEnvelope(
                status="success",
                message=f'File "{submission.file_name}" uploaded successfully to LightRAG',
                data=result.payload,
            )
        )

    except LightRAGProxyError:
        return _unreachable("uploading file")
    except Exception as e:
        logger.error(f"Upload error: {e}", exc_info=True)
        return _internal_error("uploading file")
    finally:
        await file.close()


@router.get("/documents")
async def list_documents(proxy: LightRAGProxyClient = Depends(get_proxy_client)):
    """Lista documentos do LightRAG."""
    logger.info(f"Fetching documents from {proxy.target.base_url}")

    try:
        result = await proxy.list_documents()

        if not result.ok:
            logger.error(f"Failed to fetch documents: {result.payload}")
            return _error(
                result.status_code,
                f"Failed to fetch documents from LightRAG: {result.remote_message()}",
                result.payload,
            )

        documents = result.payload.get("documents")
        return _envelope_response(
            DocumentsEnvelope(
                status="success",
                documents=documents if isinstance(documents, list) else [],
                data=result.payload,
            )
        )

    except LightRAGProxyError:
        return _unreachable("fetching documents")
    except Exception as e:
        logger.error(f"Documents fetch error: {e}", exc_info=True)
        return _internal_error("fetching documents")


@router.delete("/documents/{document_id}")
async def delete_document(
    document_id: str,
    proxy: LightRAGProxyClient = Depends(get_proxy_client),
):
    """Remove documento do LightRAG."""
    if not validate_document_id(document_id):
        logger.warning(f"Invalid document id: {document_id!r}")
        return _error(400, "Invalid document id")

    logger.info(f"Deleting document {document_id}")

    try:
        result = await proxy.delete_document(document_id)

        if not result.ok:
            logger.error(f"Failed to delete document {document_id}: {result.payload}")
            return _error(
                result.status_code,
                f"Failed to delete document from LightRAG: {result.remote_message()}",
                result.payload,
            )

        logger.info(f"Document deleted successfully: {document_id}")
        return _envelope_response(
            ResponseEnvelope(
                status="success",
                message="Document deleted successfully",
                data=result.payload,
            )
        )

    except LightRAGProxyError:
        return _unreachable("deleting document")
    except Exception as e:
        logger.error(f"Document delete error: {e}", exc_info=True)
        return _internal_error("deleting document")


@router.post("/search")
async def search(
    request: Request,
    proxy: LightRAGProxyClient = Depends(get_proxy_client),
):
    """Pergunta em linguagem natural à base de conhecimento."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    try:
        query = SearchRequest.model_validate(body).query.strip()
    except ValidationError:
        query = ""

    if not query:
        logger.warning("Search request without query")
        return _error(400, "Search query is required")

    logger.info(f"Searching for: {query}")

    try:
        result = await proxy.chat_completion(query)

        if not result.ok:
            logger.error(f"Search failed: {result.payload}")
            return _error(
                result.status_code,
                f"Search failed: {result.remote_message()}",
                result.payload,
            )

        logger.info("Search completed successfully")
        return _envelope_response(
            SearchEnvelope(
                status="success",
                answer=extract_answer(result.payload),
                data=result.payload,
            )
        )

    except LightRAGProxyError:
        return _unreachable("searching")
    except Exception as e:
        logger.error(f"Search error: {e}", exc_info=True)
        return _internal_error("searching")


@router.get("/health")
async def health_check():
    """Health check (não consulta o LightRAG)."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
