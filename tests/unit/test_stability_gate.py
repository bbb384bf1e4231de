import os

import pytest

from domains.date_filing.processors import stability
from domains.date_filing.processors.stability import FileStabilityGate, try_exclusive_open

# POSIX needs one extra poll to see an unchanged size and mtime
SETTLE_POLLS = 0 if os.name == "nt" else 1


def test_idle_file_is_stable_after_settling(tmp_path, no_sleep):
    path = tmp_path / "done.pdf"
    path.write_bytes(b"%PDF")

    assert FileStabilityGate().await_stable(path) is True
    assert no_sleep == [1.0] * SETTLE_POLLS


def test_missing_file_is_not_stable(tmp_path, no_sleep):
    assert FileStabilityGate().await_stable(tmp_path / "gone.pdf") is False
    assert no_sleep == []


def test_gate_polls_until_writer_releases(tmp_path, monkeypatch, no_sleep):
    path = tmp_path / "writing.pdf"
    path.write_bytes(b"%PDF")
    results = iter([False, False, True])
    monkeypatch.setattr(stability, "try_exclusive_open", lambda p: next(results))

    assert FileStabilityGate(max_wait=10, poll_interval=1).await_stable(path) is True
    assert no_sleep == [1] * (2 + SETTLE_POLLS)


def test_gate_gives_up_after_budget(tmp_path, monkeypatch, no_sleep):
    path = tmp_path / "stuck.pdf"
    path.write_bytes(b"%PDF")
    monkeypatch.setattr(stability, "try_exclusive_open", lambda p: False)

    gate = FileStabilityGate(max_wait=10, poll_interval=1)

    assert gate.await_stable(path) is False
    assert gate.attempts == 11
    assert no_sleep == [1] * 10


@pytest.mark.skipif(os.name == "nt", reason="size/mtime settling is POSIX only")
def test_gate_waits_while_unlocked_writer_keeps_growing(tmp_path, monkeypatch):
    path = tmp_path / "download.eml"
    writer = open(path, "wb")
    writer.write(b"Date: Mon, 3 Jun 2024")
    writer.flush()
    sleeps = []

    def write_more(seconds):
        sleeps.append(seconds)
        if len(sleeps) <= 3:
            writer.write(b" more bytes")
            writer.flush()

    monkeypatch.setattr(stability.time, "sleep", write_more)
    try:
        assert FileStabilityGate(max_wait=2, poll_interval=1).await_stable(path) is False
        assert sleeps == [1, 1]

        # Writer stops after one more chunk; the next unchanged poll passes
        assert FileStabilityGate(max_wait=10, poll_interval=1).await_stable(path) is True
        assert len(sleeps) == 4
    finally:
        writer.close()


@pytest.mark.skipif(os.name == "nt", reason="size/mtime settling is POSIX only")
def test_gate_with_no_budget_does_not_pass_unsettled_file(tmp_path, no_sleep):
    path = tmp_path / "partial.pdf"
    with open(path, "wb") as writer:
        writer.write(b"%PDF-1.7 partial")
        writer.flush()

        assert FileStabilityGate(max_wait=0).await_stable(path) is False


@pytest.mark.skipif(os.name == "nt", reason="flock semantics")
def test_try_exclusive_open_detects_lock(tmp_path):
    import fcntl

    path = tmp_path / "held.pdf"
    path.write_bytes(b"%PDF")

    with open(path, "r+b") as holder:
        fcntl.flock(holder.fileno(), fcntl.LOCK_EX)
        assert try_exclusive_open(path) is False

    assert try_exclusive_open(path) is True
