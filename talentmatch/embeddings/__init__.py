"""Embedding and chat provider clients."""

from talentmatch.embeddings.document_client import DocumentAnalyzer, GroqDocumentClient
from talentmatch.embeddings.fastembed_client import EmbeddingProvider, FastEmbedClient

__all__ = [
    "EmbeddingProvider",
    "FastEmbedClient",
    "DocumentAnalyzer",
    "GroqDocumentClient",
]
