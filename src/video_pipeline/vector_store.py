"""Vector store service for per-video Pinecone namespaces."""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import numpy as np
from pinecone import ServerlessSpec
from pinecone.exceptions import NotFoundException

from src.utils.clients import get_pinecone_client
from src.utils.logging import get_logger

from .config import ChatbotConfig
from .embedding_service import EmbeddingService
from .errors import IndexNotReadyError
from .schemas import Chunk, ChunkWithEmbedding, RetrievedChunk, StorageStats

logger = get_logger(__name__)

NAMESPACE_PREFIX = "video_"


def namespace_for(video_id: str) -> str:
    """Return the Pinecone namespace holding a video's chunks."""
    return f"{NAMESPACE_PREFIX}{video_id}"


def vector_id_for(video_id: str, chunk_index: int) -> str:
    """Return the deterministic vector id of a chunk.

    Reprocessing a video reuses the same ids, so upserts overwrite.
    """
    return f"{video_id}#{chunk_index}"


def maximal_marginal_relevance(
    query_embedding: list[float],
    embeddings: list[list[float]],
    k: int,
    lambda_mult: float = 0.5,
) -> list[int]:
    """Select k candidate indices balancing relevance against redundancy.

    Each step picks the candidate maximizing
    `lambda * sim(query, c) - (1 - lambda) * max(sim(c, selected))`
    under cosine similarity.

    Args:
        query_embedding: Query vector.
        embeddings: Candidate vectors.
        k: Number of candidates to select.
        lambda_mult: 1.0 ranks purely by relevance, 0.0 purely by diversity.

    Returns:
        Indices into `embeddings`, in selection order.
    """
    if not embeddings or k <= 0:
        return []

    candidates = np.asarray(embeddings, dtype=float)
    query = np.asarray(query_embedding, dtype=float)

    candidate_norms = np.linalg.norm(candidates, axis=1)
    candidate_norms[candidate_norms == 0] = 1.0
    query_norm = np.linalg.norm(query) or 1.0

    normalized = candidates / candidate_norms[:, None]
    query_similarity = normalized @ (query / query_norm)
    pairwise = normalized @ normalized.T

    selected = [int(np.argmax(query_similarity))]
    while len(selected) < min(k, len(embeddings)):
        redundancy = pairwise[:, selected].max(axis=1)
        scores = lambda_mult * query_similarity - (1 - lambda_mult) * redundancy
        scores[selected] = -np.inf
        selected.append(int(np.argmax(scores)))

    return selected


@dataclass
class NamespaceHandle:
    """Index handle bound to one video's namespace."""

    index: Any
    namespace: str


class VectorStoreService:
    """Service managing per-video vector collections in a Pinecone index.

    Each video lives in its own namespace of a single serverless index.
    Namespace handles are cached in memory keyed by video id; the cache only
    saves lookups and is never consulted to decide whether a video exists.
    """

    def __init__(
        self,
        config: ChatbotConfig,
        embedding_service: EmbeddingService | None = None,
    ):
        """Initialize vector store service with configuration.

        Args:
            config: Configuration object with Pinecone settings.
            embedding_service: Embedding service used for chunks and queries.
        """
        self.config = config
        self.client = get_pinecone_client(config)
        self.embedding_service = embedding_service or EmbeddingService(config)
        self._index: Any = None
        self._handles: dict[str, NamespaceHandle] = {}
        logger.info(
            "vector_store_service_initialized",
            index_name=config.pinecone_index,
        )

    # ==========================================================================
    # Index lifecycle
    # ==========================================================================

    async def get_index(self) -> Any:
        """Return the Pinecone index, creating it first if it does not exist.

        Returns:
            Pinecone Index data-plane handle.

        Raises:
            IndexNotReadyError: If a newly created index is not ready in time.
        """
        if self._index is not None:
            return self._index

        index_name = self.config.pinecone_index

        try:
            if not self.client.has_index(index_name):
                logger.info(
                    "index_creation_started",
                    index_name=index_name,
                    dimension=self.config.embedding_dimension,
                )
                self.client.create_index(
                    name=index_name,
                    dimension=self.config.embedding_dimension,
                    metric=self.config.pinecone_metric,
                    spec=ServerlessSpec(
                        cloud=self.config.pinecone_cloud,
                        region=self.config.pinecone_region,
                    ),
                )
                await self._wait_for_index_ready(index_name)

            self._index = self.client.Index(index_name)
            return self._index

        except IndexNotReadyError:
            raise
        except Exception as e:
            logger.exception(
                "index_initialization_failed",
                index_name=index_name,
                error_type=type(e).__name__,
            )
            raise

    async def _wait_for_index_ready(self, index_name: str) -> None:
        """Poll the index description until it reports ready.

        Raises:
            IndexNotReadyError: If the index is not ready before the timeout.
        """
        timeout = self.config.index_ready_timeout
        deadline = time.monotonic() + timeout

        logger.info("waiting_for_index", index_name=index_name, timeout_s=timeout)

        while True:
            description = self.client.describe_index(index_name)
            if description.status["ready"]:
                logger.info("index_ready", index_name=index_name)
                return

            if time.monotonic() >= deadline:
                logger.error("index_not_ready", index_name=index_name, timeout_s=timeout)
                raise IndexNotReadyError(
                    f"Pinecone index '{index_name}' was not ready after {timeout:g}s"
                )

            await asyncio.sleep(self.config.index_poll_interval)

    async def _namespace_vector_count(self, namespace: str) -> int:
        """Return the number of vectors stored in a namespace (0 if absent)."""
        index = await self.get_index()
        stats = index.describe_index_stats()
        summary = (stats.namespaces or {}).get(namespace)
        return int(summary.vector_count) if summary else 0

    # ==========================================================================
    # Per-video collections
    # ==========================================================================

    async def create_vector_store(self, chunks: list[Chunk], video_id: str) -> int:
        """Embed chunks and upsert them into the video's namespace.

        Vector ids are deterministic, so reprocessing overwrites existing
        vectors; vectors beyond the new chunk count are deleted.

        Args:
            chunks: Chunks to embed and store.
            video_id: YouTube video ID owning the chunks.

        Returns:
            Number of vectors upserted.

        Raises:
            Exception: If embedding or the upsert fails.
        """
        namespace = namespace_for(video_id)
        logger.info(
            "vector_store_creation_started",
            video_id=video_id,
            namespace=namespace,
            chunks=len(chunks),
        )

        try:
            index = await self.get_index()
            previous_count = await self._namespace_vector_count(namespace)

            embeddings = await self.embedding_service.embed_batch(
                [chunk.text_content for chunk in chunks]
            )
            embedded = [
                ChunkWithEmbedding(**chunk.model_dump(), embedding=embedding)
                for chunk, embedding in zip(chunks, embeddings, strict=True)
            ]

            vectors = [
                {
                    "id": vector_id_for(video_id, chunk.chunk_index),
                    "values": chunk.embedding,
                    "metadata": {
                        **chunk.metadata,
                        "text": chunk.text_content,
                        "video_id": video_id,
                        "chunk_index": chunk.chunk_index,
                        "token_count": chunk.token_count,
                    },
                }
                for chunk in embedded
            ]

            batch_size = self.config.upsert_batch_size
            for start in range(0, len(vectors), batch_size):
                index.upsert(vectors=vectors[start : start + batch_size], namespace=namespace)

            if previous_count > len(vectors):
                stale_ids = [
                    vector_id_for(video_id, i) for i in range(len(vectors), previous_count)
                ]
                index.delete(ids=stale_ids, namespace=namespace)
                logger.info(
                    "stale_vectors_deleted",
                    video_id=video_id,
                    count=len(stale_ids),
                )

            self._handles[video_id] = NamespaceHandle(index=index, namespace=namespace)

            logger.info(
                "vector_store_created",
                video_id=video_id,
                vectors=len(vectors),
            )
            return len(vectors)

        except Exception as e:
            logger.exception(
                "vector_store_creation_failed",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

    async def load_vector_store(self, video_id: str) -> NamespaceHandle:
        """Return the namespace handle for a video, from cache when possible."""
        handle = self._handles.get(video_id)
        if handle is not None:
            logger.debug("vector_store_cache_hit", video_id=video_id)
            return handle

        index = await self.get_index()
        handle = NamespaceHandle(index=index, namespace=namespace_for(video_id))
        self._handles[video_id] = handle
        logger.info("vector_store_loaded", video_id=video_id)
        return handle

    async def exists(self, video_id: str) -> bool:
        """Check whether the video's namespace holds at least one vector.

        Always asks the index; the handle cache is not trusted for this.
        Errors are logged and reported as not processed.

        Args:
            video_id: YouTube video ID to check.

        Returns:
            True if the namespace has vectors, False otherwise.
        """
        try:
            count = await self._namespace_vector_count(namespace_for(video_id))
            logger.debug("vector_store_exists_checked", video_id=video_id, vectors=count)
            return count > 0

        except Exception as e:
            logger.exception(
                "vector_store_exists_check_failed",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            return False

    async def similarity_search(
        self,
        video_id: str,
        query: str,
        k: int | None = None,
        fetch_k: int | None = None,
        lambda_mult: float | None = None,
    ) -> list[RetrievedChunk]:
        """Retrieve diverse relevant chunks with maximal marginal relevance.

        Fetches `fetch_k` nearest candidates with their vectors, then keeps
        `k` of them trading relevance against redundancy.

        Args:
            video_id: YouTube video ID to search within.
            query: User question.
            k: Number of chunks to return (default: config.retrieval_k).
            fetch_k: Candidate pool size (default: config.retrieval_fetch_k).
            lambda_mult: Relevance weight (default: config.mmr_lambda).

        Returns:
            Selected chunks in selection order.

        Raises:
            Exception: If embedding or the query fails.
        """
        k = k or self.config.retrieval_k
        fetch_k = max(fetch_k or self.config.retrieval_fetch_k, k)
        lambda_mult = self.config.mmr_lambda if lambda_mult is None else lambda_mult

        logger.info(
            "vector_search_started",
            video_id=video_id,
            k=k,
            fetch_k=fetch_k,
            lambda_mult=lambda_mult,
        )

        try:
            handle = await self.load_vector_store(video_id)
            query_embedding = await self.embedding_service.embed_text(query)

            response = handle.index.query(
                vector=query_embedding,
                top_k=fetch_k,
                namespace=handle.namespace,
                include_values=True,
                include_metadata=True,
            )
            matches = list(response.matches or [])

            selected = maximal_marginal_relevance(
                query_embedding,
                [list(match.values) for match in matches],
                k=k,
                lambda_mult=lambda_mult,
            )
            results = [self._to_retrieved_chunk(matches[i]) for i in selected]

            logger.info(
                "vector_search_completed",
                video_id=video_id,
                candidates=len(matches),
                results=len(results),
            )
            return results

        except Exception as e:
            logger.exception(
                "vector_search_failed",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

    async def similarity_search_with_score(
        self, video_id: str, query: str, k: int = 3
    ) -> list[RetrievedChunk]:
        """Retrieve the k nearest chunks ranked purely by similarity score."""
        try:
            handle = await self.load_vector_store(video_id)
            query_embedding = await self.embedding_service.embed_text(query)

            response = handle.index.query(
                vector=query_embedding,
                top_k=k,
                namespace=handle.namespace,
                include_metadata=True,
            )
            results = [self._to_retrieved_chunk(match) for match in response.matches or []]

            logger.info(
                "scored_vector_search_completed",
                video_id=video_id,
                results=len(results),
            )
            return results

        except Exception as e:
            logger.exception(
                "scored_vector_search_failed",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

    async def delete_vector_store(self, video_id: str) -> None:
        """Delete every vector of a video and evict its cached handle.

        A namespace that no longer exists is treated as already deleted.

        Args:
            video_id: YouTube video ID.

        Raises:
            Exception: If the delete request fails.
        """
        self._handles.pop(video_id, None)
        namespace = namespace_for(video_id)

        try:
            index = await self.get_index()
            index.delete(delete_all=True, namespace=namespace)
            logger.info("vector_store_deleted", video_id=video_id)

        except NotFoundException:
            logger.info("vector_store_already_absent", video_id=video_id)

        except Exception as e:
            logger.exception(
                "vector_store_delete_failed",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

    # ==========================================================================
    # Introspection
    # ==========================================================================

    async def get_processed_videos(self) -> list[str]:
        """Return ids of videos whose namespaces hold vectors."""
        index = await self.get_index()
        stats = index.describe_index_stats()

        video_ids = [
            name[len(NAMESPACE_PREFIX) :]
            for name, summary in (stats.namespaces or {}).items()
            if name.startswith(NAMESPACE_PREFIX) and summary.vector_count > 0
        ]
        logger.info("processed_videos_listed", count=len(video_ids))
        return video_ids

    async def get_storage_stats(self) -> StorageStats:
        """Summarize processed videos, cached handles and index size."""
        video_ids = await self.get_processed_videos()
        index = await self.get_index()
        stats = index.describe_index_stats()

        return StorageStats(
            processed_videos=len(video_ids),
            memory_cache_size=len(self._handles),
            video_ids=video_ids,
            total_vectors=int(stats.total_vector_count or 0),
            index_dimension=int(stats.dimension or 0),
        )

    def clear_memory_cache(self) -> None:
        """Drop every cached namespace handle."""
        self._handles.clear()
        logger.info("memory_cache_cleared")

    @staticmethod
    def _to_retrieved_chunk(match: Any) -> RetrievedChunk:
        metadata = dict(match.metadata or {})
        text = metadata.pop("text", "")
        return RetrievedChunk(
            id=match.id,
            text_content=text,
            score=float(match.score or 0.0),
            metadata=metadata,
        )
