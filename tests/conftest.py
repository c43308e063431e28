import pytest
from typer.testing import CliRunner
from typing import Any, List, Optional, Union

from agrohub.core.services.advisory_service import AdvisoryService
from agrohub.domain.interfaces.ai_model import AIModel
from agrohub.domain.interfaces.clock import Clock
from agrohub.domain.models.ai import ResponseSchema, StructuredAIResponse
from agrohub.domain.models.common import PromptText, ProviderName
from agrohub.infrastructure.cache.key_value_store import InMemoryKeyValueStore
from agrohub.infrastructure.cache.location_cache import LocationCache
from agrohub.infrastructure.config.settings import clear_test_config
from agrohub.infrastructure.resilience.api_retry import ApiRetryService
from agrohub.infrastructure.resilience.quota_guard import QuotaGuard


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# Scripted reply: response text, None for an empty body, or an exception to raise
Reply = Union[str, None, BaseException]


class FakeAIModel(AIModel):
    """AIModel that plays back scripted replies; the last one repeats."""

    def __init__(self, replies: Optional[List[Reply]] = None):
        self.replies: List[Reply] = list(replies or [])
        self.calls: List[tuple] = []

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName("fake")

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate_structured(self, prompt: PromptText, schema: ResponseSchema) -> StructuredAIResponse:
        self.calls.append((prompt, schema))
        if not self.replies:
            raise RuntimeError("no scripted reply")
        index = min(len(self.calls) - 1, len(self.replies) - 1)
        reply = self.replies[index]
        if isinstance(reply, BaseException):
            raise reply
        return StructuredAIResponse(text=reply)


class StatusError(Exception):
    """Transport error carrying an HTTP-style status attribute."""

    def __init__(self, message: str = "", status: Any = None, code: Any = None):
        super().__init__(message)
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def quota_guard(clock: ManualClock) -> QuotaGuard:
    return QuotaGuard(cooldown_seconds=300, clock=clock)


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def retry_service(quota_guard: QuotaGuard, recording_sleep: RecordingSleep, events: list) -> ApiRetryService:
    return ApiRetryService(quota_guard, provider_name="fake", sleep=recording_sleep, event_sink=events.append)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def location_cache(store: InMemoryKeyValueStore, events: list) -> LocationCache:
    return LocationCache(store, event_sink=events.append)


@pytest.fixture
def fake_model() -> FakeAIModel:
    return FakeAIModel()


@pytest.fixture
def advisory_service(fake_model: FakeAIModel, retry_service: ApiRetryService,
                     location_cache: LocationCache, events: list) -> AdvisoryService:
    return AdvisoryService(fake_model, retry_service, location_cache, event_sink=events.append)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()
