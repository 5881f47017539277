"""rag_search.pipelines.rag_pipeline

End-to-end Retrieval-Augmented Generation pipeline orchestration.

This module defines the :class:`RAGPipeline`, which coordinates query-time
retrieval, grounding-prompt construction and a single completion call.

Classes
-------
RAGPipeline
    Orchestrates retrieval → prompt building → generation.
"""

import logging
from typing import Any

from rag_search.common import CompletionError
from rag_search.retrieval.types import Retriever
from rag_search.generation.prompt_builder import DEFAULT_PROMPT_NAME, PromptBuilder, build_prompt
from rag_search.generation.llm_interface import BaseLLM

logger = logging.getLogger("rag_search.pipelines.rag_pipeline")


class RAGPipeline:
    """Retrieval-Augmented Generation (RAG) orchestrator.

    This class wires together:
    - a retriever to fetch the most relevant documents
    - a prompt builder to assemble the grounding prompt
    - an LLM interface for the completion call

    The pipeline holds no per-query state, so it can be reused across
    queries.

    Parameters
    ----------
    retriever : Retriever
        Component that embeds the query and fetches the top-k documents.
    prompt_builder : PromptBuilder
        Template registry used to render the grounding prompt.
    prompt_name : str
        Name of the prompt template to render.
    llm : BaseLLM
        Language model interface used for the completion call.
    llm_generate_defaults : dict or None, optional
        Default keyword arguments forwarded to ``llm.generate``. Defaults to
        ``{"temperature": 0}``.
    """

    def __init__(self,
                 retriever: Retriever,
                 prompt_builder: PromptBuilder,
                 llm: BaseLLM,
                 prompt_name: str = DEFAULT_PROMPT_NAME,
                 llm_generate_defaults: dict | None = None,
        ):
        self.retriever = retriever
        self.prompt_builder = prompt_builder
        self.prompt_name = prompt_name
        self.llm = llm
        self.llm_generate_defaults = (
            {'temperature': 0} if llm_generate_defaults is None else dict(llm_generate_defaults)
        )

    def run(self, query: str, **kwargs) -> dict[str, Any]:
        """Execute the RAG pipeline for a single query.

        The execution order is:
        1. Retrieve the most relevant documents for the query.
        2. Build the grounding prompt from those documents and the query.
        3. Send the prompt to the language model once.

        Parameters
        ----------
        query : str
            User's natural language question.
        **kwargs : Any
            The key ``llm_generate`` may be used to override generation
            parameters for this call only.

        Returns
        -------
        dict
            Dictionary containing:
            - ``"prompt"``: the rendered prompt string
            - ``"response"``: the model's answer text
            - ``"source_nodes"``: retrieved documents, most relevant first

        Raises
        ------
        EmbeddingError
            If the query could not be embedded.
        CompletionError
            If the language model call fails.
        """
        retrieved_docs = self.retriever.retrieve(query)
        logger.debug("Retrieved %d document(s) for query %r", len(retrieved_docs), query)

        prompt = build_prompt(
            query,
            retrieved_docs,
            builder=self.prompt_builder,
            name=self.prompt_name,
        )

        call_overrides = kwargs.pop('llm_generate', None) or {}
        gen_kwargs = {**self.llm_generate_defaults, **call_overrides}

        try:
            raw_output = self.llm.generate(prompt, **gen_kwargs)
        except CompletionError:
            raise
        except Exception as e:
            raise CompletionError(f"Completion request failed: {type(e).__name__}: {e}") from e

        return {'prompt': prompt, 'response': raw_output, 'source_nodes': retrieved_docs}

    def __call__(self, query: str, **kwargs) -> dict[str, Any]:
        """Execute the pipeline as a callable, see :meth:`run`."""
        return self.run(query, **kwargs)


__all__ = ['RAGPipeline']
