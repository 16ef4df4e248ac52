"""In-process embeddings with `sentence-transformers`.

Architectural role:
    Alternative embedding collaborator for running without a remote provider
    (`EMBEDDING_PROVIDER=local`). One model instance is shared per process.

Design intent:
    - Load the model lazily on first use.
    - Use CUDA only when enough free VRAM is available; otherwise force CPU.
    - Encode in a worker thread so the event loop keeps serving other tasks.
"""

import asyncio
import logging
import os
import threading

from askinternet.core.context import RequestContext
from askinternet.errors import EmbeddingError


logger = logging.getLogger(__name__)

_models = {}
_model_lock = threading.Lock()


def has_enough_vram(min_required_mb: int = 800) -> bool:
    """Return whether CUDA is available with at least `min_required_mb` free."""
    import torch

    if not torch.cuda.is_available():
        return False

    free_mem, _ = torch.cuda.mem_get_info()
    free_mb = free_mem / 1024 / 1024
    logger.info("Free VRAM: %.0f MB", free_mb)
    return free_mb > min_required_mb


def get_model(model_name: str):
    """Load and cache the `SentenceTransformer` for `model_name`.

    Side effects:
        Sets `CUDA_VISIBLE_DEVICES=""` when falling back to CPU.
    """
    with _model_lock:
        if model_name in _models:
            return _models[model_name]

        try:
            use_gpu = has_enough_vram()
        except ImportError:
            use_gpu = False

        if not use_gpu:
            os.environ["CUDA_VISIBLE_DEVICES"] = ""

        from sentence_transformers import SentenceTransformer

        device = "cuda" if use_gpu else "cpu"
        logger.info("Loading embedding model %s on %s", model_name, device.upper())
        _models[model_name] = SentenceTransformer(model_name, device=device)
        return _models[model_name]


class LocalEmbeddingClient:
    def __init__(self, model_name: str) -> None:
        self.model_name = model_name

    async def embed(self, texts, ctx: RequestContext):
        texts = list(texts)
        if not texts:
            return []
        return await ctx.run(asyncio.to_thread(self._encode, texts))

    def _encode(self, texts):
        try:
            vectors = get_model(self.model_name).encode(
                texts,
                batch_size=32,
                show_progress_bar=False,
                convert_to_numpy=True,
            )
        except (ImportError, OSError, RuntimeError) as exc:
            raise EmbeddingError(f"local embedding failed: {exc}") from exc
        return [vector.tolist() for vector in vectors]
