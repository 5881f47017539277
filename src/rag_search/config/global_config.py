"""rag_search.config.global_config

Global configuration loader and accessors.

This module defines a lightweight wrapper around a raw YAML configuration
dictionary, providing validated, cached access to the configuration sections
used across the retrieval and generation layers.

Environment variables of the form ``${VAR}`` are expanded recursively in all
string values at load time.

Classes
-------
GlobalConfig
    Loader and accessor for global project configuration.
"""

import os
import yaml
from pathlib import Path
from functools import cached_property

DEFAULT_CORPUS_PATH = "data.json"
DEFAULT_PROMPT_NAME = "grounded_answer"

# Cached accessors derived from a section under a different name.
_DERIVED_ACCESSORS = {"corpus": ("corpus_path",)}


def _expand_env(obj):
    """Recursively apply :func:`os.path.expandvars` to every string in ``obj``."""
    if isinstance(obj, dict):
        return {k: _expand_env(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env(v) for v in obj]
    if isinstance(obj, str):
        return os.path.expandvars(obj)
    return obj


def _section(raw: dict, name: str) -> dict:
    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise TypeError(f"'{name}' must be a mapping, got {type(section)}.")
    return section


class GlobalConfig:
    """Loader and accessor for global project configuration.

    Parameters
    ----------
    raw : dict
        Raw configuration data as loaded from a YAML file.
    config_path : Path or None, optional
        Absolute path of the loaded file, used to resolve relative paths.
    """

    def __init__(
            self,
            raw: dict,
            config_path: Path | None = None,
        ):
        if not isinstance(raw, dict):
            raise TypeError(f"Configuration root must be a mapping, got {type(raw)}.")
        self.raw = raw
        self.config_path = config_path

    @classmethod
    def load(
            cls,
            path: str | Path,
        ) -> "GlobalConfig":
        """Load configuration from a YAML file.

        Parameters
        ----------
        path : str or Path
            Path to the YAML configuration file.

        Returns
        -------
        GlobalConfig
            An instance initialised with the loaded and environment-expanded data.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist.
        """
        cfg_path = Path(path).expanduser().resolve()
        with cfg_path.open("r") as f:
            data = yaml.safe_load(f) or {}
        data = _expand_env(data)
        return cls(data, config_path=cfg_path)

    @property
    def base_dir(self) -> Path:
        """Directory relative paths are resolved against."""
        if self.config_path is not None:
            return Path(self.config_path).parent
        return Path.cwd()

    def resolve_path(self, value: str | Path) -> Path:
        """Resolve ``value`` relative to :attr:`base_dir` unless it is absolute."""
        p = Path(value).expanduser()
        if not p.is_absolute():
            p = self.base_dir / p
        return p.resolve()

    def set_override(self, section: str, key: str, value) -> None:
        """Set ``section.key`` to ``value`` and invalidate the cached accessors built from it.

        Raises
        ------
        TypeError
            If ``section`` exists but is not a mapping.
        """
        current = self.raw.get(section)
        if current is None:
            current = {}
            self.raw[section] = current
        elif not isinstance(current, dict):
            raise TypeError(f"'{section}' must be a mapping, got {type(current)}.")
        current[key] = value

        for name in (section, *_DERIVED_ACCESSORS.get(section, ())):
            self.__dict__.pop(name, None)

    @cached_property
    def generator_llm(self) -> dict:
        """Return the ``generator_llm`` section.

        Raises
        ------
        KeyError
            If the section is missing.
        """
        if "generator_llm" not in self.raw:
            raise KeyError("Missing 'generator_llm' in configuration.")
        return _section(self.raw, "generator_llm")

    @cached_property
    def embedder(self) -> dict:
        """Return the ``embedder`` section, or an empty dict (default embedder)."""
        return _section(self.raw, "embedder")

    @cached_property
    def corpus_path(self) -> Path:
        """Return the resolved corpus file path (``corpus.path``, default ``data.json``)."""
        corpus = _section(self.raw, "corpus")
        return self.resolve_path(corpus.get("path") or DEFAULT_CORPUS_PATH)

    @cached_property
    def retriever(self) -> dict:
        """Return the ``retriever`` section (``top_k``, ``min_similarity``)."""
        return _section(self.raw, "retriever")

    @cached_property
    def indexing(self) -> dict:
        """Return the ``indexing`` section (``max_concurrency``)."""
        return _section(self.raw, "indexing")

    @cached_property
    def logging(self) -> dict:
        """Return the ``logging`` section (``level``, ``format``)."""
        return _section(self.raw, "logging")

    @cached_property
    def prompts(self):
        """Return the ``prompts`` entry: a source string, a list of them, or ``None``."""
        return self.raw.get("prompts")

    @cached_property
    def prompt_name(self) -> str:
        """Return the configured prompt name, defaulting to ``"grounded_answer"``."""
        return str(self.raw.get("prompt_name") or DEFAULT_PROMPT_NAME)
