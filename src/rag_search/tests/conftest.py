import asyncio

import pytest

from rag_search.common import normalize_records


class KeywordEmbedder:
    """
    Deterministic test embedder:
    - the first keyword found in the lower-cased text picks the vector
    - text with no keyword maps to ``default``
    Every embedded text is recorded in ``calls``.
    """

    def __init__(self, mapping, default=(0.0, 0.0)):
        self.mapping = dict(mapping)
        self.default = list(default)
        self.calls = []

    def embed(self, text: str):
        self.calls.append(text)
        lowered = text.lower()
        for keyword, vector in self.mapping.items():
            if keyword in lowered:
                return list(vector)
        return list(self.default)


class FailingEmbedder(KeywordEmbedder):
    """Raises ``RuntimeError`` for any text containing ``trigger``."""

    def __init__(self, mapping, trigger="boom", **kwargs):
        super().__init__(mapping, **kwargs)
        self.trigger = trigger

    def embed(self, text: str):
        if self.trigger in text:
            raise RuntimeError("embedding backend unavailable")
        return super().embed(text)


class SlowAsyncEmbedder(KeywordEmbedder):
    """Async embedder whose earlier texts finish last, to scramble completion order."""

    def __init__(self, mapping, delays, **kwargs):
        super().__init__(mapping, **kwargs)
        self.delays = list(delays)
        self.in_flight = 0
        self.max_in_flight = 0

    async def aembed(self, text: str):
        index = len(self.calls)
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays[index % len(self.delays)])
        finally:
            self.in_flight -= 1
        lowered = text.lower()
        for keyword, vector in self.mapping.items():
            if keyword in lowered:
                return list(vector)
        return list(self.default)


ANIMAL_SPACE_MAPPING = {
    "cat": [1.0, 0.05],
    "kitten": [0.95, 0.1],
    "rocket": [0.05, 1.0],
}


@pytest.fixture
def animal_space_records():
    return [
        {"id": 1, "title": "A", "content": "cats are mammals"},
        {"id": 2, "title": "B", "content": "rockets reach orbit"},
    ]


@pytest.fixture
def animal_space_documents(animal_space_records):
    return normalize_records(animal_space_records)


@pytest.fixture
def keyword_embedder():
    return KeywordEmbedder(ANIMAL_SPACE_MAPPING)


@pytest.fixture
def make_keyword_embedder():
    return KeywordEmbedder


@pytest.fixture
def make_failing_embedder():
    return FailingEmbedder


@pytest.fixture
def make_slow_embedder():
    return SlowAsyncEmbedder
