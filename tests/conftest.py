import pytest
from loguru import logger


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)


@pytest.fixture
def no_sleep(monkeypatch):
    """Record sleeps in the gate and mover instead of waiting."""
    sleeps: list[float] = []
    from domains.date_filing.processors import mover, stability

    monkeypatch.setattr(mover.time, "sleep", sleeps.append)
    monkeypatch.setattr(stability.time, "sleep", sleeps.append)
    return sleeps
