"""rag_search.generation.prompt_builder

Prompt templates and grounding-prompt assembly.

This module provides a small registry of named Jinja2 prompt templates and
the helpers that turn retrieved documents plus a user query into the single
prompt string sent to the completion service.

Classes
-------
PromptTemplate
    Represents a single named prompt template.
PromptBuilder
    Registry and factory for prompt templates.

Functions
---------
build_context
    Join retrieved document texts into one context block.
build_prompt
    Render the grounding prompt for a query and its retrieved documents.
"""
from functools import lru_cache
from typing import Optional, List, Dict, Any, Sequence, Union
from pathlib import Path
import json
from jinja2 import Template
import warnings
from importlib import resources

from rag_search.common import Document

DEFAULT_PROMPT_SOURCE = "pkg:rag_search.generation:prompts/default.json"
DEFAULT_PROMPT_NAME = "grounded_answer"
CONTEXT_SEPARATOR = "\n\n"


class PromptTemplate:
    """Represents a single named prompt template.

    A prompt template is composed of an optional system message, zero or more
    few-shot examples, and a user instruction block, joined by newlines and
    rendered with Jinja2.

    Parameters
    ----------
    name : str
        Name of the template.
    system : str or None, optional
        System-level instructions for the template.
    few_shot : list[dict[str, str]] or None, optional
        Few-shot examples. Each entry is expected to contain a ``"content"`` key.
    user : str, optional
        User instruction part of the template.
    """

    def __init__(self,
                 name: str,
                 system: Optional[str] = None,
                 few_shot: Optional[List[Dict[str, str]]] = None,
                 user: Optional[str] = ''
        ):
        self.name = name
        self.system = system
        self.few_shot = few_shot or []
        self.user = user

    def render(self, **kwargs) -> str:
        """Render the full prompt with ``kwargs`` substituted into every part."""
        parts = []
        if self.system:
            parts.append(self.system)
        for example in self.few_shot:
            parts.append(example.get('content', ''))
        if self.user:
            parts.append(self.user)
        template_str = "\n".join(parts)
        return Template(template_str).render(**kwargs)


class PromptBuilder:
    """Registry and factory for prompt templates.

    Templates are registered from dictionaries, JSON files or JSON resources
    bundled in a package, and rendered by name.
    """

    def __init__(self):
        self.templates: Dict[str, PromptTemplate] = {}

    def register_from_dict(self, data: Dict[str, Any]):
        """Register a new template from a dictionary.

        Parameters
        ----------
        data : dict[str, Any]
            Template definition with keys ``"name"``, ``"system"``,
            ``"few_shot"`` and ``"user"``.

        Raises
        ------
        KeyError
            If ``"name"`` is missing from ``data``.
        TypeError
            If fields are of invalid types.
        ValueError
            If ``"name"`` is empty.
        """
        if "name" not in data:
            raise KeyError("Template definition missing required key: 'name'")
        name = data["name"]
        if not isinstance(name, str):
            raise TypeError(f"Template 'name' must be a str, got {type(name)!r}")
        if not name.strip():
            raise ValueError("Template 'name' must be a non-empty string")

        few_shot = data.get("few_shot")
        if few_shot is not None and not isinstance(few_shot, list):
            raise TypeError(f"Template 'few_shot' must be a list or None, got {type(few_shot)!r}")

        template = PromptTemplate(
            name=name,
            system=data.get("system"),
            few_shot=few_shot,
            user=data.get("user") or "",
        )
        if name in self.templates:
            warnings.warn(f"Overwriting existing prompt template: {name}")
        self.templates[name] = template

    def _register_payload(self, data: Any, origin: str) -> List[str]:
        if isinstance(data, dict):
            self.register_from_dict(data)
            return [data["name"]]
        if isinstance(data, list):
            registered: List[str] = []
            for item in data:
                if not isinstance(item, dict):
                    raise TypeError(f"Template list items must be dicts, got {type(item)!r}")
                self.register_from_dict(item)
                registered.append(item["name"])
            return registered
        raise TypeError(f"{origin} must contain an object or list of objects, got {type(data)!r}")

    def register_from_file(self, path: Union[Path, str], base_dir: Optional[Path] = None) -> List[str]:
        """Load and register templates from a JSON file.

        Parameters
        ----------
        path : Path | str
            Path to a JSON file containing one or more template definitions.
        base_dir : Path | None, optional
            If provided and ``path`` is relative, resolve it relative to this directory.

        Returns
        -------
        list[str]
            Names of templates registered from this file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ValueError
            If the file extension is not supported.
        """
        p = Path(path)
        if not p.is_absolute() and base_dir is not None:
            p = base_dir / p
        p = p.resolve()
        if not p.exists():
            raise FileNotFoundError(f"Prompt file not found: {p}")
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported file type: {p.suffix}")

        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)

        return self._register_payload(data, origin=f"Prompt file {p}")

    def register_from_package(self, package: str, resource_path: str) -> List[str]:
        """Load and register templates from a JSON resource bundled in ``package``.

        Raises
        ------
        FileNotFoundError
            If the resource does not exist.
        ValueError
            If the resource extension is not supported.
        """
        if not resource_path.lower().endswith(".json"):
            raise ValueError(f"Unsupported resource type: {resource_path}")

        try:
            res = resources.files(package).joinpath(resource_path)
        except ModuleNotFoundError as e:
            raise FileNotFoundError(f"Could not locate resource '{resource_path}' in package '{package}'") from e

        if not res.is_file():
            raise FileNotFoundError(f"Prompt resource not found: pkg:{package}:{resource_path}")

        data = json.loads(res.read_text(encoding="utf-8"))
        return self._register_payload(data, origin=f"Prompt resource pkg:{package}:{resource_path}")

    def register_from_source(self, source: str, base_dir: Optional[Path] = None) -> List[str]:
        """Register templates from a source spec.

        Supported formats
        -----------------
        - ``pkg:<package>:<resource_path>``
        - ``file:<path>``
        - ``<path>`` (plain filesystem path)
        """
        if not isinstance(source, str):
            raise TypeError(f"source must be a str, got {type(source)!r}")

        if source.startswith("pkg:"):
            rest = source[len("pkg:"):]
            if ":" not in rest:
                raise ValueError("pkg: sources must be of the form 'pkg:<package>:<resource_path>'")
            package, resource_path = rest.split(":", 1)
            return self.register_from_package(package.strip(), resource_path.strip())

        if source.startswith("file:"):
            path_str = source[len("file:"):].strip()
            return self.register_from_file(Path(path_str), base_dir=base_dir)

        return self.register_from_file(Path(source), base_dir=base_dir)

    def list_prompts(self) -> List[str]:
        """Return a sorted list of registered prompt template names."""
        return sorted(self.templates.keys())

    def has_prompt(self, name: str) -> bool:
        """Return True if a prompt template with this name is registered."""
        return name in self.templates

    def get_template(self, name: str) -> PromptTemplate:
        """Get a registered PromptTemplate by name.

        Raises
        ------
        KeyError
            If no template is registered under ``name``.
        """
        if name not in self.templates:
            available = ", ".join(self.list_prompts())
            raise KeyError(f"No template registered under name: {name}. Available: [{available}]")
        return self.templates[name]

    def build(self, name: str, **kwargs) -> str:
        """Render the template registered under ``name`` with ``kwargs``."""
        return self.get_template(name).render(**kwargs)


@lru_cache(maxsize=1)
def default_prompt_builder() -> PromptBuilder:
    """Return a shared builder holding the bundled default templates."""
    builder = PromptBuilder()
    builder.register_from_source(DEFAULT_PROMPT_SOURCE)
    return builder


def build_context(documents: Sequence[Document]) -> str:
    """Join the ``text`` of each document with a blank line between them."""
    return CONTEXT_SEPARATOR.join(doc.text for doc in documents)


def build_prompt(
        query: str,
        documents: Sequence[Document],
        *,
        builder: Optional[PromptBuilder] = None,
        name: str = DEFAULT_PROMPT_NAME,
    ) -> str:
    """Render the grounding prompt for ``query`` and its retrieved documents.

    Parameters
    ----------
    query : str
        The user's query.
    documents : Sequence[Document]
        Retrieved documents, most relevant first.
    builder : PromptBuilder or None, optional
        Template registry. Defaults to the bundled templates.
    name : str, optional
        Template name. Defaults to ``"grounded_answer"``.

    Returns
    -------
    str
        The prompt: the document texts separated by blank lines, followed by
        the query, inside the named template.
    """
    builder = builder or default_prompt_builder()
    return builder.build(name, context=build_context(documents), question=query)


__all__ = [
    "PromptTemplate",
    "PromptBuilder",
    "DEFAULT_PROMPT_NAME",
    "default_prompt_builder",
    "build_context",
    "build_prompt",
]
