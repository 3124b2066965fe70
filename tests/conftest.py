"""Pytest bootstrap configuration.

Mandatory environment variables are set before any module import that reads
application settings. Fixtures provide a fake clock, a recording sleep and a
client factory so no test waits on real delays.
"""

import os
import random
import tempfile

os.environ.setdefault("PAYMENTS_API_KEY", "live_secret_key")
os.environ.setdefault("PAYMENTS_MODE", "live")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{tempfile.mkdtemp()}/simpay-test.db")
os.environ.pop("OTEL_EXPORTER_OTLP_ENDPOINT", None)

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from simpay.common.db import Base  # noqa: E402
from simpay.common.errors import PaymentError  # noqa: E402
from simpay.services.gateway.models import PaymentRecord  # noqa: E402,F401
from simpay.services.processor.client import TEST_API_KEY, PaymentClient  # noqa: E402
from simpay.services.processor.schemas import ClientConfig, RateLimitPolicy, RetryPolicy  # noqa: E402
from simpay.services.processor.simulator import LatencySimulator  # noqa: E402


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Monotonic clock stand-in advanced by hand (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class AlwaysFail:
    """Failure injector returning a fresh error each call; keeps them for assertions."""

    def __init__(self, code, message: str = "simulated") -> None:
        self.code = code
        self.message = message
        self.raised: list[PaymentError] = []

    def __call__(self):
        error = PaymentError(self.message, self.code)
        self.raised.append(error)
        return error


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backoff_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def latency_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_client(clock, backoff_sleep, latency_sleep):
    """Build a client whose latency and backoff sleeps are recorded separately."""

    def factory(
        mode: str = "live",
        api_key: str | None = None,
        retry: RetryPolicy | None = None,
        rate_limit: RateLimitPolicy | None = None,
        failure_injector=None,
        seed: int = 7,
        debug: bool = False,
    ) -> PaymentClient:
        rng = random.Random(seed)
        config = ClientConfig(
            api_key=api_key if api_key is not None else (TEST_API_KEY if mode == "test" else "live_secret_key"),
            mode=mode,
            debug=debug,
            retry=retry or RetryPolicy(max_retries=3, backoff_ms=100),
            rate_limit=rate_limit or RateLimitPolicy(max_attempts=100, window_ms=60_000),
        )
        return PaymentClient(
            config,
            failure_injector=failure_injector,
            latency=LatencySimulator(rng=rng, sleep=latency_sleep),
            rng=rng,
            clock=clock,
            sleep=backoff_sleep,
        )

    return factory


@pytest.fixture
def session_factory():
    """Isolated in-memory SQLite database with the record table created."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    engine.dispose()
