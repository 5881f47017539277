"""rag_search.generation

Prompt assembly and LLM interfaces.

Modules
-------
prompt_builder
    Jinja2 prompt templates and grounding-prompt assembly.
llm_interface
    LLM wrappers and factory.
"""
