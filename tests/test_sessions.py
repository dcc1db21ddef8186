"""Tests for the in-memory session registry and view state."""
import pytest
from pydantic import TypeAdapter

import sessions
from models import View, VOCABULARY_LESSONS


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture()
def clock(monkeypatch):
    fake = Clock()
    monkeypatch.setattr(sessions.time, "time", fake)
    return fake


def test_session_within_ttl_is_kept(clock, monkeypatch):
    monkeypatch.setattr(sessions, "SESSION_TTL", 60)
    session = sessions.create_session()
    clock.now += 59
    assert sessions.get_session(session.id) is session


def test_expired_session_is_replaced(clock, monkeypatch):
    monkeypatch.setattr(sessions, "SESSION_TTL", 60)
    old = sessions.create_session()
    clock.now += 61

    assert sessions.get_session(old.id) is None
    new = sessions.get_or_create_session(old.id)
    assert new.id != old.id
    assert sessions.session_count() == 1


def test_idle_sessions_are_dropped_on_create(clock, monkeypatch):
    monkeypatch.setattr(sessions, "SESSION_TTL", 60)
    sessions.create_session()
    sessions.create_session()
    clock.now += 61
    fresh = sessions.create_session()
    assert sessions.session_count() == 1
    assert sessions.get_session(fresh.id) is fresh


def test_access_renews_ttl(clock, monkeypatch):
    monkeypatch.setattr(sessions, "SESSION_TTL", 60)
    session = sessions.create_session()
    clock.now += 50
    assert sessions.get_session(session.id) is session
    clock.now += 50
    assert sessions.get_session(session.id) is session


def test_cap_evicts_oldest_session(clock, monkeypatch):
    monkeypatch.setattr(sessions, "SESSION_MAX", 2)
    a = sessions.create_session()
    b = sessions.create_session()
    c = sessions.create_session()

    assert sessions.session_count() == 2
    assert sessions.get_session(a.id) is None
    assert sessions.get_session(b.id) is b
    assert sessions.get_session(c.id) is c


def test_cap_evicts_least_recently_used(clock, monkeypatch):
    monkeypatch.setattr(sessions, "SESSION_MAX", 2)
    a = sessions.create_session()
    b = sessions.create_session()
    clock.now += 1
    assert sessions.get_session(a.id) is a

    sessions.create_session()
    assert sessions.get_session(b.id) is None
    assert sessions.get_session(a.id) is a


def test_missing_id_creates_session():
    assert sessions.get_session(None) is None
    assert sessions.get_session("") is None
    session = sessions.get_or_create_session(None)
    assert sessions.get_session(session.id) is session


@pytest.mark.parametrize("kind, expected", [
    (View.HELP, {"view": "help", "selected": None, "lines": []}),
    (View.GRAMMAR, {"view": "grammar", "selected": None, "paragraphs": []}),
    (View.VOCABULARY, {"view": "vocabulary", "selected": None, "content": None, "translated": None}),
    (View.CHAT, {"view": "chat"}),
])
def test_switch_starts_empty_view(kind, expected):
    session = sessions.TutorSession("s1")
    session.state = sessions.HelpView(selected="Ordering food")
    session.switch(kind)
    assert session.view == kind
    assert session.state.model_dump(mode="json") == expected


def test_view_state_is_tagged_by_view():
    adapter = TypeAdapter(sessions.ViewState)
    state = adapter.validate_python({"view": "vocabulary", "selected": VOCABULARY_LESSONS[0].model_dump()})
    assert isinstance(state, sessions.VocabularyView)
    assert state.selected == VOCABULARY_LESSONS[0]

    with pytest.raises(ValueError):
        adapter.validate_python({"view": "settings"})
