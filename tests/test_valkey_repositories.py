# ==============================================================================
# Tests for Valkey Repositories
# ==============================================================================
"""
Tests for ValkeyEventRepository and ValkeySessionRepository against fakeredis.

Tests cover:
- save() stores the event and creates/updates the session atomically
- N events for one session give total_page_views == N
- Concurrent saves for the same session lose no updates
- find_between() is inclusive and ordered oldest first
- list_recent() orders by last_seen_at descending and honours the limit
- Methods fail clearly before connect()
"""

import threading
from datetime import timedelta

import pytest

from sitepulse.infrastructure.repositories.valkey import ValkeyEventRepository


# ==============================================================================
# Writes
# ==============================================================================


class TestSave:
    """Tests for ValkeyEventRepository.save()."""

    def test_first_event_creates_session(self, event_repo, session_repo, make_event, now):
        session = event_repo.save(make_event(session_id="s1", country="NL"))

        assert session.total_page_views == 1
        stored = session_repo.get("s1")
        assert stored == session
        assert stored.first_seen_at == now
        assert stored.country == "NL"
        assert stored.city is None

    def test_repeated_events_accumulate(self, event_repo, session_repo, make_event, now):
        for minute in range(4):
            event_repo.save(make_event(session_id="s1", created_at=now + timedelta(minutes=minute)))

        session = session_repo.get("s1")
        assert session.total_page_views == 4
        assert session.total_visits == 1
        assert session.last_seen_at == now + timedelta(minutes=3)

    def test_keys_use_prefix(self, event_repo, fake_redis, make_event):
        event_repo.save(make_event(session_id="s1"))

        assert fake_redis.zcard("test:events") == 1
        assert fake_redis.exists("test:session:s1") == 1
        assert fake_redis.zscore("test:sessions:last_seen", "s1") is not None

    def test_concurrent_saves_same_session(self, fake_redis, settings, session_repo, make_event):
        """WATCH/MULTI retries keep every increment."""
        threads_count, per_thread = 4, 10
        events = [
            [make_event(session_id="shared") for _ in range(per_thread)]
            for _ in range(threads_count)
        ]

        def worker(batch):
            repo = ValkeyEventRepository(fake_redis, settings=settings, key_prefix="test")
            for event in batch:
                repo.save(event)

        threads = [threading.Thread(target=worker, args=(batch,)) for batch in events]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert session_repo.get("shared").total_page_views == threads_count * per_thread
        assert fake_redis.zcard("test:events") == threads_count * per_thread

    def test_not_connected(self, settings, make_event):
        repo = ValkeyEventRepository(settings=settings)
        with pytest.raises(RuntimeError, match="Call connect\\(\\) first"):
            repo.save(make_event())


# ==============================================================================
# Reads
# ==============================================================================


class TestFindBetween:
    """Tests for ValkeyEventRepository.find_between()."""

    def test_inclusive_and_ordered(self, event_repo, make_event, now):
        start, end = now - timedelta(minutes=10), now
        event_repo.save(make_event("/late", created_at=end))
        event_repo.save(make_event("/start", created_at=start))
        event_repo.save(make_event("/mid", created_at=now - timedelta(minutes=5)))
        event_repo.save(make_event("/before", created_at=start - timedelta(seconds=1)))
        event_repo.save(make_event("/after", created_at=end + timedelta(seconds=1)))

        events = event_repo.find_between(start, end)
        assert [e.page_path for e in events] == ["/start", "/mid", "/late"]

    def test_round_trips_event_fields(self, event_repo, make_event):
        original = make_event(page_title="Home", referrer="https://example.com", city="Oslo")
        event_repo.save(original)

        (stored,) = event_repo.find_between(original.created_at, original.created_at)
        assert stored == original


class TestListRecent:
    """Tests for ValkeySessionRepository.list_recent()."""

    def test_most_recent_first(self, event_repo, session_repo, make_event, now):
        event_repo.save(make_event(session_id="old", created_at=now - timedelta(hours=2)))
        event_repo.save(make_event(session_id="new", created_at=now))
        event_repo.save(make_event(session_id="mid", created_at=now - timedelta(hours=1)))

        assert [s.session_id for s in session_repo.list_recent(10)] == ["new", "mid", "old"]

    def test_limit(self, event_repo, session_repo, make_event, now):
        for i in range(5):
            event_repo.save(make_event(session_id=f"s{i}", created_at=now + timedelta(seconds=i)))

        sessions = session_repo.list_recent(2)
        assert [s.session_id for s in sessions] == ["s4", "s3"]

    def test_reordered_by_new_activity(self, event_repo, session_repo, make_event, now):
        event_repo.save(make_event(session_id="a", created_at=now))
        event_repo.save(make_event(session_id="b", created_at=now + timedelta(minutes=1)))
        event_repo.save(make_event(session_id="a", created_at=now + timedelta(minutes=2)))

        assert [s.session_id for s in session_repo.list_recent(10)] == ["a", "b"]

    def test_empty(self, session_repo):
        assert session_repo.list_recent(10) == []
        assert session_repo.get("missing") is None
