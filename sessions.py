"""In-memory tutor sessions and their current view."""
import os
import time
import secrets
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from collections import OrderedDict

from log import get_logger

logger = get_logger("englishmate.sessions")

from models import View, Lesson, ConversationLine, Message
from tutor import ListFeed

SESSION_TTL = int(os.environ.get("SESSION_TTL", str(3600 * 24)))
SESSION_MAX = int(os.environ.get("SESSION_MAX", "1000"))


# --- View state ---
# One variant per sidebar section, tagged by `view`. Switching section swaps
# the whole object, so a previous section's selection never leaks into the next one.

class HelpView(BaseModel):
    view: Literal["help"] = "help"
    selected: Optional[str] = None
    lines: List[ConversationLine] = []


class GrammarView(BaseModel):
    view: Literal["grammar"] = "grammar"
    selected: Optional[str] = None
    paragraphs: List[ConversationLine] = []


class VocabularyView(BaseModel):
    view: Literal["vocabulary"] = "vocabulary"
    selected: Optional[Lesson] = None
    content: Optional[str] = None
    translated: Optional[str] = None


class ChatView(BaseModel):
    view: Literal["chat"] = "chat"


ViewState = Annotated[
    Union[HelpView, GrammarView, VocabularyView, ChatView],
    Field(discriminator="view"),
]

_view_adapter = TypeAdapter(ViewState)


def empty_view(kind: View) -> ViewState:
    return _view_adapter.validate_python({"view": kind.value})


class TutorSession:
    def __init__(self, session_id: str):
        self.id = session_id
        self.scenarios: ListFeed[str] = ListFeed("scenarios")
        self.grammar_topics: ListFeed[str] = ListFeed("grammar")
        self.lessons: ListFeed[Lesson] = ListFeed("lessons", key=lambda lesson: lesson.id)
        self.messages: List[Message] = []
        self.state: ViewState = HelpView()
        self.touched_at = time.time()

    @property
    def view(self) -> View:
        return View(self.state.view)

    def switch(self, kind: View) -> ViewState:
        self.state = empty_view(kind)
        return self.state

    def back(self) -> ViewState:
        """Drop the current selection, staying in the same section."""
        return self.switch(self.view)

    def add_message(self, text: str, sender: str) -> Message:
        msg = Message(text=text, sender=sender)
        self.messages.append(msg)
        return msg

    def snapshot(self) -> dict:
        return {
            "session_id": self.id,
            "state": self.state.model_dump(mode="json"),
            "scenarios": {"items": self.scenarios.items.to_list(), "has_more": self.scenarios.has_more},
            "grammar_topics": {"items": self.grammar_topics.items.to_list(), "has_more": self.grammar_topics.has_more},
            "lessons": {
                "items": [lesson.model_dump() for lesson in self.lessons.items],
                "has_more": self.lessons.has_more,
            },
            "messages": [m.model_dump() for m in self.messages],
        }


# --- Registry ---
_sessions: OrderedDict = OrderedDict()  # id -> TutorSession


def _cleanup_sessions():
    cutoff = time.time() - SESSION_TTL
    stale = [sid for sid, s in _sessions.items() if s.touched_at < cutoff]
    for sid in stale:
        _sessions.pop(sid, None)
    if stale:
        logger.info("Expired idle sessions", extra={"component": "sessions", "count": len(stale)})


def create_session() -> TutorSession:
    _cleanup_sessions()
    session = TutorSession(secrets.token_hex(16))
    _sessions[session.id] = session
    while len(_sessions) > SESSION_MAX:
        _sessions.popitem(last=False)
    return session


def get_session(session_id: Optional[str]) -> Optional[TutorSession]:
    if not session_id:
        return None
    session = _sessions.get(session_id)
    if session is None:
        return None
    if time.time() - session.touched_at > SESSION_TTL:
        _sessions.pop(session_id, None)
        return None
    session.touched_at = time.time()
    _sessions.move_to_end(session_id)
    return session


def get_or_create_session(session_id: Optional[str]) -> TutorSession:
    return get_session(session_id) or create_session()


def session_count() -> int:
    return len(_sessions)


def clear_sessions():
    _sessions.clear()
