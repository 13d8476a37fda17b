"""Unit tests for candidate selection and preferred-model ordering."""

from unittest.mock import AsyncMock

import pytest

from model_relay.core.exceptions import RegistryUnavailable
from model_relay.core.models import Model
from model_relay.core.registry import InMemoryRegistryStore, ModelRegistryAccessor, prioritize


def ids(models):
    return [m.id for m in models]


@pytest.fixture
def store():
    return InMemoryRegistryStore(
        [
            Model(id="slow", provider="Groq", priority=5),
            Model(id="off", provider="Groq", priority=0, enabled=False),
            Model(id="fast", provider="Gemini", priority=1),
            Model(id="tie-a", provider="OpenAI", priority=3),
            Model(id="tie-b", provider="OpenAI", priority=3),
        ],
        {"summaries": ["slow", "off", "tie-b"], "empty": []},
    )


@pytest.mark.unit
@pytest.mark.asyncio
class TestListCandidates:
    async def test_sorted_by_priority_excluding_disabled(self, store):
        candidates = await ModelRegistryAccessor(store).list_candidates("general")

        assert ids(candidates) == ["fast", "tie-a", "tie-b", "slow"]

    async def test_feature_restriction_keeps_priority_order(self, store):
        candidates = await ModelRegistryAccessor(store).list_candidates("summaries")

        assert ids(candidates) == ["tie-b", "slow"]

    async def test_empty_restriction_means_no_restriction(self, store):
        candidates = await ModelRegistryAccessor(store).list_candidates("empty")

        assert ids(candidates) == ["fast", "tie-a", "tie-b", "slow"]

    async def test_restriction_to_disabled_models_yields_nothing(self):
        store = InMemoryRegistryStore(
            [Model(id="m-a", provider="Groq", enabled=False), Model(id="m-b", provider="Groq")],
            {"general": ["m-a"]},
        )

        assert await ModelRegistryAccessor(store).list_candidates("general") == []

    async def test_missing_feature_skips_feature_map(self):
        mock_store = AsyncMock()
        mock_store.list_models.return_value = [Model(id="a", provider="Groq")]

        candidates = await ModelRegistryAccessor(mock_store).list_candidates(None)

        assert ids(candidates) == ["a"]
        mock_store.get_feature_map.assert_not_called()

    async def test_store_failure_propagates(self, store):
        store.available = False

        with pytest.raises(RegistryUnavailable):
            await ModelRegistryAccessor(store).list_candidates("general")


@pytest.mark.unit
class TestPrioritize:
    def setup_method(self) -> None:
        self.candidates = [
            Model(id="a", provider="Groq", priority=1),
            Model(id="b", provider="Groq", priority=2),
            Model(id="c", provider="Groq", priority=3),
        ]

    def test_preferred_model_moves_to_front(self):
        assert ids(prioritize(self.candidates, "c")) == ["c", "a", "b"]

    def test_absent_preferred_model_keeps_order(self):
        assert ids(prioritize(self.candidates, "zzz")) == ["a", "b", "c"]

    def test_no_preference_keeps_order(self):
        assert ids(prioritize(self.candidates, None)) == ["a", "b", "c"]

    def test_does_not_mutate_input(self):
        prioritize(self.candidates, "b")

        assert ids(self.candidates) == ["a", "b", "c"]
