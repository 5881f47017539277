"""rag_search.generation.llm_interface

Unified interface and factory for large language model (LLM) backends.

This module defines a small, provider-agnostic abstraction for text
generation and a concrete implementation backed by LangChain's
OpenAI-compatible chat model. A factory function is provided to instantiate
the appropriate LLM implementation from a configuration mapping.

Classes
-------
BaseLLM
    Abstract interface specifying the API used by the RAG pipeline.
OpenAIChatLikeLLM
    Chat completions using an OpenAI-compatible HTTP API via LangChain.

Functions
---------
create_llm
    Construct an LLM implementation from a configuration mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional
from langchain_core.callbacks import BaseCallbackHandler
from langchain_openai import ChatOpenAI


class BaseLLM(ABC):
    """Abstract interface for LLM text generation.

    Concrete implementations wrap provider-specific clients and expose a
    small, consistent API used by the RAG pipeline.
    """

    @classmethod
    @abstractmethod
    def from_config_dict(
            cls,
            config: dict,
            callback_manager: BaseCallbackHandler = None
        ) -> "BaseLLM":
        """Create an LLM instance from a configuration mapping.

        Parameters
        ----------
        config : dict
            Configuration parameters for the concrete implementation.
        callback_manager : BaseCallbackHandler, optional
            Optional callback handler for logging/telemetry/streaming.

        Returns
        -------
        BaseLLM
            An initialised LLM implementation.
        """
        pass

    @abstractmethod
    def get_llm(self) -> Any:
        """Return the underlying LangChain model object."""
        pass

    @abstractmethod
    def generate(
            self,
            prompt: str,
            **kwargs
        ) -> str:
        """Generate text for a single prompt.

        Parameters
        ----------
        prompt : str
            Prompt text to send to the model.
        **kwargs
            Additional keyword arguments forwarded to the underlying model.

        Returns
        -------
        str
            Generated text.
        """
        pass

    def complete(self, prompt: str) -> str:
        """Generate text for ``prompt`` using the configured defaults."""
        return self.generate(prompt)


class OpenAIChatLikeLLM(BaseLLM):
    """LLM interface using an OpenAI-compatible Chat Completions API via LangChain.

    This implementation wraps :class:`langchain_openai.ChatOpenAI`. Any
    OpenAI-compatible endpoint (OpenAI, OpenRouter, a local server) can be
    targeted through ``api_base``.

    Parameters
    ----------
    model_name : str
        Model identifier (e.g., ``"openai/gpt-3.5-turbo"``).
    api_base : str or None
        Base URL for the OpenAI-compatible API endpoint. ``None`` uses the
        client default.
    api_key : str, optional
        API key value. Defaults to ``"fake"`` for local deployments that do
        not require authentication.
    default_headers : dict[str, str] or None, optional
        Extra HTTP headers sent with every request (OpenRouter uses
        ``HTTP-Referer`` and ``X-Title`` for attribution).
    callback_manager : BaseCallbackHandler, optional
        Optional callback handler for logging/telemetry/streaming.
    **model_kwargs : Any
        Additional keyword arguments forwarded to ``ChatOpenAI`` (e.g.,
        ``temperature``, ``max_tokens``, ``timeout``).
    """

    def __init__(
        self,
        model_name: str,
        api_base: str | None = None,
        api_key: str = "fake",
        default_headers: dict[str, str] | None = None,
        callback_manager: BaseCallbackHandler = None,
        **model_kwargs: Any,
    ):
        self.model_name = model_name
        self.api_base = api_base
        self.model_kwargs = dict(model_kwargs)
        self.default_stop_list = self.model_kwargs.pop("stop_list", None)

        init_kwargs: dict[str, Any] = dict(self.model_kwargs)
        init_kwargs.setdefault("temperature", 0)
        # One request per query; failures are reported, not retried.
        init_kwargs.setdefault("max_retries", 0)
        init_kwargs["model"] = model_name
        if api_base:
            init_kwargs["base_url"] = api_base
        if api_key is not None:
            init_kwargs["api_key"] = api_key
        if default_headers:
            init_kwargs["default_headers"] = dict(default_headers)
        if callback_manager is not None:
            init_kwargs["callbacks"] = [callback_manager]

        self.llm = ChatOpenAI(**init_kwargs)

    @classmethod
    def from_config_dict(
        cls,
        config: dict,
        callback_manager: BaseCallbackHandler = None,
    ) -> "OpenAIChatLikeLLM":
        """Create an OpenAI-compatible chat LLM from a mapping.

        Raises
        ------
        KeyError
            If ``model_name`` is missing.
        """
        return cls(
            model_name=config["model_name"],
            api_base=config.get("api_base"),
            api_key=config.get("api_key", "fake"),
            default_headers=config.get("default_headers"),
            callback_manager=callback_manager,
            **(config.get("model_kwargs") or {}),
        )

    def get_llm(self) -> Any:
        """Return the underlying LangChain chat model object."""
        return self.llm

    def generate(self, prompt: str, **kwargs) -> str:
        """Send ``prompt`` as a single user message and return the reply text."""
        if not isinstance(prompt, str):
            prompt = prompt.to_string() if hasattr(prompt, "to_string") else str(prompt)

        run_kwargs = dict(kwargs)
        explicit_stop = run_kwargs.pop("stop", None)
        final_stop = explicit_stop or self.default_stop_list

        response = self.llm.invoke(prompt, stop=final_stop, **run_kwargs)
        return response.content if hasattr(response, "content") else response


# ----------------- Factory helpers -----------------

def _get_llm_kind(cfg: Mapping[str, Any]) -> str:
    """Return the first non-empty ``kind/type/provider/backend/impl`` value, or ``""``."""
    for key in ("kind", "type", "provider", "backend", "impl"):
        val = cfg.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return ""


def _normalize_llm_kind(kind: str) -> str:
    """Normalise an LLM kind string to a stable registry key.

    CamelCase becomes snake_case, whitespace and hyphens become underscores,
    and the common spellings of the chat provider collapse to ``"openai_chat"``.
    """
    k = kind.strip()
    if not k:
        return ""

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

    k2 = k2.replace("chat_open_ai", "openai_chat")
    k2 = k2.replace("chat_openai", "openai_chat")
    k2 = k2.replace("open_aichat_like", "openai_chat")
    k2 = k2.replace("open_ai_chat_like", "openai_chat")
    k2 = k2.replace("openai_chat_like", "openai_chat")
    k2 = k2.replace("open_ai", "openai")

    return k2


def create_llm(config: Mapping[str, Any], callback_manager: Optional[BaseCallbackHandler] = None) -> BaseLLM:
    """Create an LLM implementation from a configuration mapping.

    The concrete implementation is selected by a discriminator field in the
    configuration (one of: ``kind``, ``type``, ``provider``, ``backend``,
    or ``impl``).

    Parameters
    ----------
    config : Mapping[str, Any]
        Configuration mapping used to construct the LLM.
    callback_manager : BaseCallbackHandler, optional
        Optional callback handler for logging/telemetry/streaming.

    Returns
    -------
    BaseLLM
        An initialised LLM implementation.

    Raises
    ------
    TypeError
        If ``config`` is not a mapping.
    ValueError
        If the discriminator field is missing or selects an unsupported
        implementation.
    """

    if not isinstance(config, Mapping):
        raise TypeError(f"create_llm expected a mapping/dict, got {type(config)}")

    kind_raw = _get_llm_kind(config)
    kind = _normalize_llm_kind(kind_raw)

    if not kind:
        raise ValueError(
            "LLM config is missing a discriminator field (type/kind/provider/etc.). "
            "Add e.g. type: OpenAIChatLike."
        )

    registry: dict[str, type[BaseLLM]] = {
        "openai_chat": OpenAIChatLikeLLM,
        "chatopenai": OpenAIChatLikeLLM,
        "openai": OpenAIChatLikeLLM,
        "openrouter": OpenAIChatLikeLLM,
    }

    cls = registry.get(kind)
    if cls is None:
        raise ValueError(
            f"Unknown LLM kind '{kind_raw}' (normalized to '{kind}'). Supported kinds: {sorted(registry.keys())}."
        )

    return cls.from_config_dict(dict(config), callback_manager=callback_manager)


__all__ = [
    "BaseLLM",
    "OpenAIChatLikeLLM",
    "create_llm",
]
