"""
Pairwise signature comparators for gallery-based verification.

A comparator answers one question: how similar are two stored samples,
on a [0, 1] scale. Scores are clamped before they reach the engine.

Samples enrolled without client features get a signature_descriptor, so
the default feature comparator always has vectors to work with.
"""

import io
from typing import List, Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from core.config import settings
from core.exceptions import RecognitionUnavailableError
from core.logging import get_logger
from models.domain.signature import SignatureSample

logger = get_logger(__name__)


def clamp_score(score: float) -> float:
    """Clamp a similarity into [0, 1]; NaN counts as 0."""
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0.0
    if value != value:
        return 0.0
    return max(0.0, min(1.0, value))


class SignatureComparator:
    """Interface: compare(probe, candidate) -> similarity in [0, 1]."""

    name = "base"

    async def compare(self, probe: SignatureSample, candidate: SignatureSample) -> float:
        raise NotImplementedError


class FeatureVectorComparator(SignatureComparator):
    """
    Cosine similarity over stored feature vectors.
    Samples without comparable vectors score 0.
    """

    name = "features"

    async def compare(self, probe: SignatureSample, candidate: SignatureSample) -> float:
        a = probe.feature_vector
        b = candidate.feature_vector
        if a is None or b is None or len(a) != len(b):
            return 0.0

        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)
        if norm_a == 0 or norm_b == 0:
            return 0.0

        similarity = float(np.dot(a / norm_a, b / norm_b))
        return clamp_score(similarity)


class RpcSignatureComparator(SignatureComparator):
    """
    Delegates to the compare_signatures database function.
    """

    name = "rpc"

    def __init__(self, supabase_client):
        self.client = supabase_client

    async def compare(self, probe: SignatureSample, candidate: SignatureSample) -> float:
        try:
            response = self.client.rpc(
                "compare_signatures",
                {"sig1_id": probe.id, "sig2_id": candidate.id}
            ).execute()
        except Exception as e:
            logger.warning(f"compare_signatures({probe.id}, {candidate.id}) failed: {e}")
            raise RecognitionUnavailableError(
                f"Signature comparison failed: {e}",
                operation="compare_signatures"
            )

        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            data = data.get("compare_signatures", data.get("similarity"))
        return clamp_score(data)


# ============================================================
# Descriptor for samples enrolled without features
# ============================================================

DESCRIPTOR_GRID = (32, 16)  # width, height
INK_LEVEL = 0.1


def signature_descriptor(content: bytes) -> Optional[List[float]]:
    """
    Ink-density grid of a signature image, cropped to the ink and centred
    to zero mean, so cosine over two descriptors is their correlation.

    Transparent pixels count as paper. Returns None when Pillow cannot read
    the image or it holds no ink.
    """
    try:
        with Image.open(io.BytesIO(content)) as image:
            image = image.convert("RGBA")
            paper = Image.new("RGBA", image.size, (255, 255, 255, 255))
            gray = np.asarray(Image.alpha_composite(paper, image).convert("L"), dtype=np.float64)
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not build signature descriptor: {e}")
        return None

    ink = 1.0 - gray / 255.0
    rows = np.flatnonzero(ink.max(axis=1) > INK_LEVEL)
    cols = np.flatnonzero(ink.max(axis=0) > INK_LEVEL)
    if rows.size == 0 or cols.size == 0:
        return None

    cropped = ink[rows[0]:rows[-1] + 1, cols[0]:cols[-1] + 1]
    grid = Image.fromarray(np.uint8(np.round(cropped * 255))).resize(DESCRIPTOR_GRID, Image.BILINEAR)
    vector = np.asarray(grid, dtype=np.float64).ravel() / 255.0
    vector -= vector.mean()
    if not np.any(vector):
        return None
    return [round(float(v), 5) for v in vector]


# Global instance
_comparator: Optional[SignatureComparator] = None


def get_comparator() -> SignatureComparator:
    """Get singleton comparator chosen by COMPARISON_BACKEND."""
    global _comparator
    if _comparator is None:
        backend = settings.comparison_backend.lower()
        if backend == "features":
            _comparator = FeatureVectorComparator()
        elif backend == "rpc":
            from infrastructure.supabase import get_supabase_client
            _comparator = RpcSignatureComparator(get_supabase_client())
        else:
            raise ValueError(f"Unknown COMPARISON_BACKEND: {settings.comparison_backend}")
        logger.info(f"Signature comparator: {_comparator.name}")
    return _comparator
