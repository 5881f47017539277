"""rag_search.pipelines

Pipeline orchestration components for the rag_search system.

This package contains the high-level pipeline that coordinates retrieval,
prompt construction and language model generation.

Modules
-------
rag_pipeline
    End-to-end Retrieval-Augmented Generation (RAG) pipeline.
"""
