import sys
from pathlib import Path

import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from foodrag.config import Settings  # noqa: E402
from foodrag.providers import ProviderRegistry  # noqa: E402
from foodrag.vector_store.simple_store import SimpleVectorStore  # noqa: E402
from tests.fakes import BagOfWordsEmbedder, RecordingLLM  # noqa: E402


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        vector_db_type="simple",
        simple_db_path=str(tmp_path / "simple_vector_db.json"),
        embedding_provider="none",
        llm_provider="ollama",
        foods_path=str(tmp_path / "foods.json"),
        rag_results=3,
        admin_token="secret",
    )


@pytest.fixture
def simple_store(settings: Settings) -> SimpleVectorStore:
    return SimpleVectorStore(settings.simple_db_path)


@pytest.fixture
def embedder() -> BagOfWordsEmbedder:
    return BagOfWordsEmbedder()


@pytest.fixture
def llm() -> RecordingLLM:
    return RecordingLLM()


@pytest.fixture
def registry(settings, simple_store, embedder, llm) -> ProviderRegistry:
    return ProviderRegistry(
        settings,
        vector_store_factory=lambda s: simple_store,
        embedding_factory=lambda s: embedder,
        llm_factory=lambda s: llm,
    )
