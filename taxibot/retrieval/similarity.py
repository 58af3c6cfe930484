import numpy as np


def cosine_scores(query_vector: list[float], vectors: list[list[float]]) -> list[float]:
    """Cosine similarity of each vector against the query; zero-norm vectors score 0."""
    if not vectors:
        return []
    matrix = np.asarray(vectors, dtype=float)
    query = np.asarray(query_vector, dtype=float)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)
    return [float(score) for score in scores]


def top_k(scores: list[float], k: int) -> list[int]:
    """Indices of the k best scores, descending; ties keep original order."""
    ranked = sorted(range(len(scores)), key=lambda index: -scores[index])
    return ranked[:k]
