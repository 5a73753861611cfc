import asyncio
import threading

import pytest

from foodrag.errors import ProviderInitializationError, UnsupportedQueryError
from foodrag.vector_store.base import VectorRecord
from foodrag.vector_store.chroma_store import ChromaVectorStore


class FakeCollection:
    def __init__(self) -> None:
        self.rows = {}
        self.last_query = None
        self.threads = []

    def upsert(self, ids, embeddings, metadatas, documents):
        self.threads.append(threading.get_ident())
        for doc_id, emb, meta, doc in zip(ids, embeddings, metadatas, documents):
            self.rows[doc_id] = (doc, emb, meta)

    def query(self, query_embeddings, n_results, include):
        self.threads.append(threading.get_ident())
        self.last_query = {"query_embeddings": query_embeddings, "n_results": n_results, "include": include}
        ids = list(self.rows)[:n_results]
        return {
            "ids": [ids],
            "documents": [[self.rows[i][0] for i in ids]],
            "metadatas": [[self.rows[i][2] for i in ids]],
            "distances": [[0.1 * (n + 1) for n in range(len(ids))]],
        }

    def get(self, include):
        self.threads.append(threading.get_ident())
        return {"ids": list(self.rows)}


class FakeChromaClient:
    def __init__(self) -> None:
        self.collection = FakeCollection()
        self.created = []

    def get_or_create_collection(self, name, metadata=None):
        self.created.append((name, metadata))
        return self.collection


def make_store():
    client = FakeChromaClient()
    store = ChromaVectorStore(persist_directory="unused", collection_name="foods", client=client)
    asyncio.run(store.initialize())
    return store, client


def test_initialize_uses_cosine_collection():
    _, client = make_store()
    assert client.created == [("foods", {"hnsw:space": "cosine"})]


def test_requires_initialize():
    store = ChromaVectorStore(persist_directory="unused", client=FakeChromaClient())
    with pytest.raises(ProviderInitializationError):
        asyncio.run(store.get_existing_ids())


def test_upsert_query_and_ids():
    store, client = make_store()
    records = [
        VectorRecord(id="1", text="A banana is a yellow fruit.", embedding=[1.0, 0.0], metadata={"region": "Tropical"}),
        VectorRecord(id="2", text="Kimchi is spicy.", embedding=[0.0, 1.0]),
    ]

    async def scenario():
        await store.add_documents(records)
        await store.add_documents(
            [VectorRecord(id="1", text="A banana is a yellow fruit.", embedding=[0.9, 0.1], metadata={"region": "Tropical"})]
        )
        return await store.query([1.0, 0.0], 2), await store.get_existing_ids()

    result, ids = asyncio.run(scenario())

    assert ids == ["1", "2"]
    assert result.ids == ["1", "2"]
    assert result.distances == pytest.approx([0.1, 0.2])
    assert result.metadatas == [{"region": "Tropical"}, None]
    assert client.collection.rows["1"][1] == [0.9, 0.1]


def test_collection_calls_run_off_the_event_loop_thread():
    store, client = make_store()

    async def scenario():
        loop_thread = threading.get_ident()
        await store.add_documents([VectorRecord(id="1", text="Pho.", embedding=[1.0, 0.0], metadata={"region": "Vietnam"})])
        await store.query([1.0, 0.0], 1)
        await store.get_existing_ids()
        return loop_thread

    loop_thread = asyncio.run(scenario())

    assert len(client.collection.threads) == 3
    assert loop_thread not in client.collection.threads


def test_text_query_rejected():
    store, _ = make_store()
    with pytest.raises(UnsupportedQueryError):
        asyncio.run(store.query("banana", 2))
