import asyncio

import pytest

from foodrag.config import Settings
from foodrag.errors import ProviderInitializationError, RetryExhaustedError
from foodrag.vector_store.base import VectorRecord
from foodrag.vector_store.upstash_store import ID_SCAN_TOP_K, AttributeKeywordFilter, UpstashVectorStore
from tests.fakes import FakeUpstashIndex, query_result


async def no_sleep(delay: float) -> None:
    no_sleep.delays.append(delay)


no_sleep.delays = []


@pytest.fixture(autouse=True)
def reset_delays():
    no_sleep.delays.clear()


def make_store(settings, index, keywords=None):
    policy = AttributeKeywordFilter(keywords) if keywords is not None else None
    return UpstashVectorStore(settings=settings, index=index, filter_policy=policy, sleep=no_sleep)


def test_initialize_requires_credentials(settings):
    store = UpstashVectorStore(settings=settings)
    with pytest.raises(ProviderInitializationError, match="URL and TOKEN"):
        asyncio.run(store.initialize())


def test_operations_require_initialize(settings):
    store = UpstashVectorStore(settings=settings)
    with pytest.raises(ProviderInitializationError, match="not initialized"):
        asyncio.run(store.query("banana", 3))


def test_text_query_is_embedded_server_side(settings):
    index = FakeUpstashIndex()
    index.results = [
        query_result("1", 0.9, "A banana is a yellow fruit."),
        query_result("2", 0.4, "Kimchi is spicy."),
    ]
    store = make_store(settings, index)

    result = asyncio.run(store.query("What is a banana?", 3))

    assert index.queries[0]["data"] == "What is a banana?"
    assert index.queries[0]["vector"] is None
    assert index.queries[0]["top_k"] == 3
    assert result.ids == ["1", "2"]
    assert result.documents == ["A banana is a yellow fruit.", "Kimchi is spicy."]
    assert result.distances == pytest.approx([0.1, 0.6])
    assert result.metadatas[0]["document"] == "A banana is a yellow fruit."


def test_vector_query_uses_vector(settings):
    index = FakeUpstashIndex()
    index.results = [query_result("1", 0.75, "doc")]
    store = make_store(settings, index, keywords=["yellow"])

    result = asyncio.run(store.query([0.1, 0.2], 2))

    assert index.queries[0]["vector"] == [0.1, 0.2]
    assert index.queries[0]["top_k"] == 2
    assert result.distances == pytest.approx([0.25])


def test_keyword_filter_drops_documents_missing_the_attribute(settings):
    index = FakeUpstashIndex()
    index.results = [
        query_result("6", 0.95, "Lemons are sour yellow citrus fruits."),
        query_result("2", 0.93, "Mango is a sweet stone fruit."),
        query_result("1", 0.90, "A banana is a yellow fruit."),
        query_result("4", 0.50, "Kimchi is a spicy side dish."),
    ]
    store = make_store(settings, index, keywords=["yellow", "sweet", "fruit"])

    result = asyncio.run(store.query("Which fruits are yellow?", 2))

    # over-fetch so filtering still leaves k candidates
    assert index.queries[0]["top_k"] == 4
    assert result.ids == ["6", "1"]


def test_keyword_filter_can_be_disabled(settings):
    index = FakeUpstashIndex()
    index.results = [query_result("4", 0.5, "Kimchi is a spicy side dish.")]
    store = make_store(settings, index, keywords=None)

    result = asyncio.run(store.query("Which fruits are yellow?", 3))

    assert result.ids == ["4"]


def test_add_documents_upserts_enriched_text_with_display_metadata(settings):
    index = FakeUpstashIndex()
    store = make_store(settings, index)
    record = VectorRecord(
        id="1",
        text="A banana is a yellow fruit.",
        indexed_text="A banana is a yellow fruit. This food is popular in Tropical.",
        metadata={"region": "Tropical", "type": None},
    )

    asyncio.run(store.add_documents([record]))

    (doc_id, data, metadata), = index.upserts[0]
    assert doc_id == "1"
    assert data.endswith("popular in Tropical.")
    assert metadata["document"] == "A banana is a yellow fruit."
    assert metadata["region"] == "Tropical"
    assert "type" not in metadata
    assert "timestamp" in metadata


def test_get_existing_ids_uses_random_probe(settings):
    settings = Settings(embedding_dimension=8)
    index = FakeUpstashIndex()
    index.results = [query_result("1", 0.1), query_result("2", 0.05)]
    store = make_store(settings, index)

    ids = asyncio.run(store.get_existing_ids())

    assert ids == ["1", "2"]
    assert len(index.queries[0]["vector"]) == 8
    assert index.queries[0]["top_k"] == ID_SCAN_TOP_K
    assert index.queries[0]["include_metadata"] is False


def test_transient_failures_are_retried(settings):
    index = FakeUpstashIndex(failures=2)
    index.results = [query_result("1", 0.8, "A banana is a yellow fruit.")]
    store = make_store(settings, index)

    result = asyncio.run(store.query("banana", 1))

    assert result.ids == ["1"]
    assert no_sleep.delays == [1.0, 2.0]


class HangingIndex(FakeUpstashIndex):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    async def query(self, data=None, vector=None, top_k=10, include_metadata=False):
        self.calls += 1
        await asyncio.Event().wait()


def test_hung_call_times_out_and_is_retried():
    settings = Settings(request_timeout_sec=0.05)
    index = HangingIndex()
    store = make_store(settings, index)

    with pytest.raises(RetryExhaustedError) as info:
        asyncio.run(store.query("banana", 1))

    assert index.calls == 3
    assert isinstance(info.value.last_error, asyncio.TimeoutError)
    assert no_sleep.delays == [1.0, 2.0]


def test_persistent_failure_surfaces_after_three_attempts(settings):
    index = FakeUpstashIndex(failures=5)
    store = make_store(settings, index)

    with pytest.raises(RetryExhaustedError, match="upstash unavailable"):
        asyncio.run(store.add_documents([VectorRecord(id="1", text="x")]))
    assert index.failures == 2
