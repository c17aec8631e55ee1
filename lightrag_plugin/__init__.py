"""LightRAG plugin - Integração LibreChat <-> LightRAG proxy."""

__version__ = "0.1.0"

from .config import (
    DEFAULT_PROXY_URL,
    ForwardingTarget,
    LightRAGConfig,
    get_lightrag_config,
    reload_lightrag_config,
    resolve_target,
)
from .forwarding_client import LightRAGForwardingClient
from .models import EncodedMultipart, FileSubmission, ResponseEnvelope
from .multipart import encode_multipart
from .proxy_client import LightRAGProxyClient, LightRAGProxyError, ProxyResponse
from .router import router as lightrag_router
from .upload_hook import send_file_to_lightrag, send_file_to_lightrag_from_path

__all__ = [
    # Config
    "DEFAULT_PROXY_URL",
    "ForwardingTarget",
    "LightRAGConfig",
    "get_lightrag_config",
    "reload_lightrag_config",
    "resolve_target",
    # Upload
    "FileSubmission",
    "EncodedMultipart",
    "encode_multipart",
    "LightRAGForwardingClient",
    "send_file_to_lightrag",
    "send_file_to_lightrag_from_path",
    # Routes
    "LightRAGProxyClient",
    "LightRAGProxyError",
    "ProxyResponse",
    "ResponseEnvelope",
    "lightrag_router",
]
