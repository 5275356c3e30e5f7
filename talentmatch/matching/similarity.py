"""Cosine similarity between embedding vectors."""

from collections.abc import Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from talentmatch.errors import ShapeMismatchError


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Compute cosine similarity between two vectors.

    Args:
        a: First vector.
        b: Second vector, same length as `a`.

    Returns:
        Similarity in [-1, 1]. 0.0 if either vector has zero norm.

    Raises:
        ShapeMismatchError: If the vectors differ in length.
    """
    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)

    if vec_a.shape != vec_b.shape:
        raise ShapeMismatchError(
            f"Vectors must have the same length: {vec_a.size} != {vec_b.size}"
        )

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(vec_a, vec_b) / (norm_a * norm_b))
    # Rounding can push identical vectors slightly past 1
    return max(-1.0, min(1.0, similarity))


def compute_similarities_batch(
    query_embedding: np.ndarray,
    embeddings: np.ndarray,
) -> np.ndarray:
    """Compute cosine similarity between a query and many vectors.

    Zero-norm rows score 0.0.

    Args:
        query_embedding: Query vector (1D).
        embeddings: Matrix of candidate vectors (n_candidates, n_features).

    Returns:
        Array of similarity scores (n_candidates,).

    Raises:
        ShapeMismatchError: If the matrix width differs from the query length.
    """
    if embeddings.ndim != 2 or embeddings.shape[1] != query_embedding.shape[0]:
        raise ShapeMismatchError(
            f"Embedding matrix {embeddings.shape} does not match query length "
            f"{query_embedding.shape[0]}"
        )

    # Sklearn expects 2D arrays (samples, features)
    similarities = sk_cosine_similarity(
        query_embedding.reshape(1, -1),
        embeddings,
    )[0]
    return np.clip(similarities, -1.0, 1.0)
