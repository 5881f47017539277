"""rag_search.retrieval.embedder

Embedding interfaces and factories for the retrieval layer.

This module defines a small provider-agnostic interface for producing vector
embeddings from text, along with concrete implementations backed by
LlamaIndex embedding wrappers. A factory function is provided to construct
an embedder implementation from configuration.

Classes
-------
BaseEmbedder
    Abstract interface specifying the API used by the indexing and query pipelines.
HuggingFaceEmbedder
    Embedder backed by a Hugging Face SentenceTransformer via LlamaIndex.
OpenAILikeEmbedder
    Embedder backed by an OpenAI-compatible HTTP API via LlamaIndex.

Functions
---------
create_embedder
    Create an embedder implementation from a configuration mapping.
"""

from abc import ABC, abstractmethod
import asyncio
from langchain_core.callbacks import BaseCallbackHandler
from llama_index.core.base.embeddings.base import BaseEmbedding as LlamaIndexBaseEmbedding
from typing import Any, Dict, Mapping, Optional

from rag_search.common import EmbeddingError

DEFAULT_EMBED_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off"}:
            return False
    return bool(value)


class BaseEmbedder(ABC):
    """Abstract interface for text embedding.

    Concrete implementations wrap a provider-specific embedder and expose the
    ``embed(text) -> list[float]`` contract used by the indexing and query
    pipelines. Every provider failure surfaces as
    :class:`~rag_search.common.errors.EmbeddingError`.
    """

    @abstractmethod
    def get_embedder(self) -> LlamaIndexBaseEmbedding:
        """
        Return the LlamaIndex embedding instance.

        Returns
        -------
        LlamaIndexBaseEmbedding
            The underlying LlamaIndex embedding.
        """
        pass

    @classmethod
    @abstractmethod
    def from_config_dict(
            cls,
            config: Dict[str, Any],
            callback_manager: BaseCallbackHandler = None
        ) -> "BaseEmbedder":
        """Create an embedder from a configuration mapping.

        Parameters
        ----------
        config : dict[str, Any]
            Configuration mapping.
        callback_manager : BaseCallbackHandler, optional
            Optional callback handler for logging/telemetry/streaming.

        Returns
        -------
        BaseEmbedder
            An initialised embedder implementation.

        Raises
        ------
        KeyError
            If required configuration keys are missing.
        """
        pass

    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Parameters
        ----------
        text : str
            Text to embed.

        Returns
        -------
        list[float]
            Embedding vector.

        Raises
        ------
        EmbeddingError
            If the underlying embedder fails.
        """
        embedder = self.get_embedder()
        try:
            return list(embedder.get_text_embedding(text))
        except Exception as e:
            raise EmbeddingError(f"Failed to embed text with {type(embedder).__name__}: {e}") from e

    async def aembed(self, text: str) -> list[float]:
        """Asynchronously embed a single text.

        The blocking :meth:`embed` call runs in the default thread pool via
        ``run_in_executor``. Backends with a native async API override this.

        Parameters
        ----------
        text : str
            Text to embed.

        Returns
        -------
        list[float]
            Embedding vector.

        Raises
        ------
        EmbeddingError
            If the underlying embedder fails.
        """
        loop = asyncio.get_running_loop()

        return await loop.run_in_executor(None, self.embed, text)

    def embed_documents(self, documents: list[str]) -> list[list[float]]:
        """Embed multiple texts, in order.

        Parameters
        ----------
        documents : list[str]
            Texts to embed.

        Returns
        -------
        list[list[float]]
            Embedding vectors for each text.
        """
        return [self.embed(doc) for doc in documents]


class HuggingFaceEmbedder(BaseEmbedder):
    """Embedder backed by a Hugging Face SentenceTransformer via LlamaIndex.

    This implementation wraps :class:`llama_index.embeddings.huggingface.HuggingFaceEmbedding`.
    Vectors are mean-pooled and unit-normalised.

    Parameters
    ----------
    model_name : str
        Name or path of the embedding model.
    device : str or None
        Device identifier (e.g., ``"cuda"``, ``"cpu"``, ``"mps"``). ``None``
        lets the backend pick.
    trust_remote_code : bool, optional
        Whether to allow custom model code from the Hugging Face Hub.
    callback_manager : BaseCallbackHandler, optional
        Optional callback handler for logging/telemetry/streaming.
    model_kwargs : dict[str, Any] or None, optional
        Additional keyword arguments forwarded to the underlying embedder.
    """

    def __init__(
            self,
            model_name: str = DEFAULT_EMBED_MODEL,
            *,
            device: Optional[str] = None,
            trust_remote_code: bool = False,
            callback_manager: BaseCallbackHandler = None,
            model_kwargs: dict[str, Any] = None,
        ):
        from llama_index.embeddings.huggingface import HuggingFaceEmbedding

        self.model_name = model_name
        self.embedder = HuggingFaceEmbedding(
            model_name=model_name,
            normalize=True,
            trust_remote_code=trust_remote_code,
            device=device,
            callback_manager=callback_manager,
            model_kwargs=model_kwargs or {},
        )

    def get_embedder(self) -> LlamaIndexBaseEmbedding:
        """Return the underlying LlamaIndex embedding object."""
        return self.embedder

    @classmethod
    def from_config_dict(
            cls,
            config: Dict[str, Any],
            callback_manager: BaseCallbackHandler = None
        ) -> "HuggingFaceEmbedder":
        """Create a Hugging Face embedder from a configuration mapping.

        Parameters
        ----------
        config : dict[str, Any]
            Configuration mapping. Recognised keys are ``model_name``,
            ``device``, ``trust_remote_code`` and ``model_kwargs``; all optional.
        callback_manager : BaseCallbackHandler, optional
            Optional callback handler for logging/telemetry/streaming.

        Returns
        -------
        HuggingFaceEmbedder
            An initialised embedder instance.
        """
        return cls(
            model_name=config.get("model_name", DEFAULT_EMBED_MODEL),
            device=config.get("device"),
            trust_remote_code=_as_bool(config.get("trust_remote_code"), False),
            callback_manager=callback_manager,
            model_kwargs=config.get("model_kwargs", {}),
        )


class OpenAILikeEmbedder(BaseEmbedder):
    """Embedder backed by an OpenAI-compatible embedding API via LlamaIndex.

    This implementation wraps :class:`llama_index.embeddings.openai_like.OpenAILikeEmbedding`.

    Parameters
    ----------
    model_name : str
        Model identifier for the embedding endpoint.
    api_base : str
        Base URL for the OpenAI-compatible embedding API endpoint.
    api_key : str or None, optional
        API key for the endpoint.
    callback_manager : BaseCallbackHandler, optional
        Optional callback handler for logging/telemetry/streaming.
    model_kwargs : dict[str, Any] or None, optional
        Additional keyword arguments forwarded to the underlying embedder.
    timeout : float, optional
        Request timeout in seconds.
    max_retries : int, optional
        Retries performed by the HTTP client.
    """

    def __init__(
            self,
            model_name: str,
            *,
            api_base: str,
            api_key: str = None,
            callback_manager: BaseCallbackHandler = None,
            model_kwargs: dict[str, Any] = None,
            timeout: float = 60.0,
            max_retries: int = 3,
        ):
        from llama_index.embeddings.openai_like import OpenAILikeEmbedding

        self.model_name = model_name
        self.embedder = OpenAILikeEmbedding(
            model_name=model_name,
            api_base=api_base,
            callback_manager=callback_manager,
            additional_kwargs=model_kwargs or {},
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
        )

    async def aembed(self, text: str) -> list[float]:
        """Embed ``text`` through the client's native async HTTP call."""
        try:
            return list(await self.embedder.aget_text_embedding(text))
        except Exception as e:
            raise EmbeddingError(f"Failed to embed text with {type(self.embedder).__name__}: {e}") from e

    def get_embedder(self) -> LlamaIndexBaseEmbedding:
        """Return the underlying LlamaIndex embedding object."""
        return self.embedder

    @classmethod
    def from_config_dict(
            cls,
            config: Dict[str, Any],
            callback_manager: BaseCallbackHandler = None
        ) -> "OpenAILikeEmbedder":
        """Create an OpenAI-compatible embedder from a configuration mapping.

        Raises
        ------
        KeyError
            If required keys (``model_name`` or ``api_base``) are missing.
        """
        return cls(
            model_name=config["model_name"],
            api_base=config["api_base"],
            api_key=config.get("api_key"),
            callback_manager=callback_manager,
            model_kwargs=config.get("model_kwargs", {}),
            timeout=float(config.get("timeout", config.get("request_timeout", 60.0))),
            max_retries=int(config.get("max_retries", 3)),
        )


# ----------------- Factory helpers -----------------

def _get_embedder_kind(cfg: Mapping[str, Any]) -> str:
    """Return the first non-empty ``kind/type/provider/backend/impl`` value, or ``""``."""
    for key in ("kind", "type", "provider", "backend", "impl"):
        val = cfg.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return ""


def _normalize_embedder_kind(kind: str) -> str:
    """Normalise an embedder kind string to a stable registry key.

    CamelCase becomes snake_case, whitespace and hyphens become underscores,
    and repeated underscores collapse (``"OpenAILike"`` -> ``"openai_like"``).
    """
    k = kind.strip()
    if not k:
        return ""

    # Insert underscores between camel-case boundaries.
    out: list[str] = []
    prev = ""
    for ch in k:
        if prev and prev.islower() and ch.isupper():
            out.append("_")
        out.append(ch)
        prev = ch

    k2 = "".join(out)
    k2 = k2.replace("-", "_").replace(" ", "_")

    while "__" in k2:
        k2 = k2.replace("__", "_")

    k2 = k2.lower()

    k2 = k2.replace("open_ailike", "openai_like")
    k2 = k2.replace("open_ai_like", "openai_like")
    k2 = k2.replace("hugging_face", "huggingface")

    return k2


_EMBEDDER_REGISTRY: dict[str, type[BaseEmbedder]] = {
    "huggingface": HuggingFaceEmbedder,
    "hf": HuggingFaceEmbedder,
    "openai_like": OpenAILikeEmbedder,
    "openai": OpenAILikeEmbedder,
}


def create_embedder(
    config: Mapping[str, Any],
    callback_manager: Optional[BaseCallbackHandler] = None,
) -> BaseEmbedder:
    """Create an embedder implementation from a configuration mapping.

    The concrete implementation is selected by a discriminator field in the
    configuration (one of: ``kind``, ``type``, ``provider``, ``backend``, or
    ``impl``). If none is given, :class:`HuggingFaceEmbedder` is used.

    Parameters
    ----------
    config : Mapping[str, Any]
        Configuration mapping used to construct the embedder.
    callback_manager : BaseCallbackHandler, optional
        Optional callback handler for logging/telemetry/streaming.

    Returns
    -------
    BaseEmbedder
        An initialised embedder implementation.

    Raises
    ------
    TypeError
        If ``config`` is not a mapping.
    ValueError
        If the discriminator selects an unsupported implementation.
    """
    if not isinstance(config, Mapping):
        raise TypeError(f"create_embedder expected a mapping/dict, got {type(config)}")

    kind_raw = _get_embedder_kind(config)
    kind = _normalize_embedder_kind(kind_raw)

    cls = _EMBEDDER_REGISTRY.get(kind) if kind else HuggingFaceEmbedder

    if cls is None:
        raise ValueError(
            f"Unknown embedder kind '{kind_raw}' (normalized to '{kind}'). "
            f"Supported kinds: {sorted(_EMBEDDER_REGISTRY.keys())}."
        )

    return cls.from_config_dict(dict(config), callback_manager=callback_manager)


__all__ = [
    "BaseEmbedder",
    "HuggingFaceEmbedder",
    "OpenAILikeEmbedder",
    "create_embedder",
]
