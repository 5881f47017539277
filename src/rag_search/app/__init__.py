"""rag_search.app

Application wiring: the composition root, the interactive session loop and
the command-line entry point.
"""
