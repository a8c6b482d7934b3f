import logging
import os
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import pytest
import yaml

# Set test environment variables
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def _strip_file_handlers():
    """Remove file handlers from root logger so tests never write to logs/app.log."""
    root = logging.getLogger()
    saved = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    for h in saved:
        root.removeHandler(h)
    yield
    # Restore any that were removed (and strip any new ones tests may have added)
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler):
            root.removeHandler(h)
    for h in saved:
        root.addHandler(h)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def _default_rules() -> Dict[str, Any]:
    from lifedash.core.typed_config_loader import DEFAULTS_PATH

    with open(DEFAULTS_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)["rules"]


@pytest.fixture
def configuration():
    """The shipped default rules."""
    from lifedash.core.typed_config_loader import get_default_configuration

    return get_default_configuration()


@pytest.fixture
def config_factory():
    """Build a Configuration from the defaults with nested overrides applied."""
    from lifedash.core.typed_config_loader import build_configuration, deep_merge

    def _make(overrides: Optional[Dict[str, Any]] = None):
        return build_configuration(deep_merge(_default_rules(), overrides or {}))

    return _make


class StaticConfigurationProvider:
    """ConfigurationProvider returning a fixed snapshot."""

    def __init__(self, configuration) -> None:
        self.configuration = configuration
        self.loads = 0

    async def load(self):
        self.loads += 1
        return self.configuration


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture
def clock():
    # Tuesday, midday
    return FakeClock(datetime(2026, 3, 10, 12, 0))


# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------


class InMemoryDayRecordRepository:
    def __init__(self, records: Dict) -> None:
        self.records = records

    async def get(self, day):
        return self.records.get(day)

    async def save(self, record) -> None:
        self.records[record.date] = record

    async def list_range(self, start, end) -> List:
        return [r for d, r in sorted(self.records.items()) if start <= d <= end]

    async def latest_date_before(self, day):
        earlier = [d for d in self.records if d < day]
        return max(earlier) if earlier else None


class InMemoryStreakStateRepository:
    def __init__(self, states: Dict) -> None:
        self.states = states

    async def load_all(self) -> Dict:
        return dict(self.states)

    async def save_all(self, states: Dict) -> None:
        self.states.update(states)


class InMemoryScoreHistoryRepository:
    def __init__(self, entries: Dict) -> None:
        self.entries = entries

    async def record(self, day, snapshot) -> None:
        self.entries[day] = snapshot

    async def list_recent(self, days: int) -> List[Tuple]:
        return sorted(self.entries.items(), reverse=True)[:days]


class InMemoryDayStateLogRepository:
    def __init__(self, entries: List) -> None:
        self.entries = entries

    async def append(self, transition) -> None:
        self.entries.append(transition)

    async def list_for(self, day) -> List:
        return [t for t in self.entries if t.date == day]


class InMemoryStore:
    """Committed state shared by every unit of work."""

    def __init__(self) -> None:
        self.days: Dict = {}
        self.streaks: Dict = {}
        self.scores: Dict = {}
        self.state_log: List = []
        self.commits = 0
        self.fail_on_commit = False


class InMemoryUnitOfWork:
    """Works on copies of the store; only commit() publishes them."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def __aenter__(self):
        self.days = InMemoryDayRecordRepository(dict(self._store.days))
        self.streaks = InMemoryStreakStateRepository(dict(self._store.streaks))
        self.scores = InMemoryScoreHistoryRepository(dict(self._store.scores))
        self.state_log = InMemoryDayStateLogRepository(list(self._store.state_log))
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def commit(self) -> None:
        if self._store.fail_on_commit:
            raise RuntimeError("disk full")
        self._store.days = self.days.records
        self._store.streaks = self.streaks.states
        self._store.scores = self.scores.entries
        self._store.state_log = self.state_log.entries
        self._store.commits += 1


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service_factory(store, clock):
    """Build a DayLifecycleService over the in-memory store."""
    from lifedash.services.day_lifecycle import DayLifecycleService

    def _make(configuration):
        return DayLifecycleService(
            lambda: InMemoryUnitOfWork(store),
            StaticConfigurationProvider(configuration),
            clock,
        )

    return _make


@pytest.fixture
def lifecycle_service(service_factory, configuration):
    return service_factory(configuration)
