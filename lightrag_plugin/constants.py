"""Paths e limites do contrato REST do LightRAG proxy."""

UPLOAD_PATH = "/v1/files/upload"
DOCUMENTS_PATH = "/v1/documents"
CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

# Máximo de caracteres de resposta bruta nos logs
LOG_BODY_LIMIT = 500

SERVICE_NAME = "lightrag-plugin"
