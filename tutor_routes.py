"""Tutor API: scenario, grammar and lesson browsing plus free chat."""
from typing import Optional

from log import get_logger

logger = get_logger("englishmate.tutor_routes")

from fastapi import APIRouter, Header, HTTPException, Response

from models import (
    TARGET_LANGUAGE, View,
    SCENARIO_LIST_PROMPT, SCENARIO_DETAIL_PROMPT,
    GRAMMAR_LIST_PROMPT, GRAMMAR_DETAIL_PROMPT, LESSON_CONTENT_TEMPLATE,
    SCENARIO_DETAIL_FAILED, GRAMMAR_DETAIL_FAILED, LESSON_CONTENT_FAILED, CHAT_ERROR_PREFIX,
    VOCABULARY_LESSONS,
    ViewRequest, SelectLabelRequest, SelectLessonRequest, ChatRequest,
    FeedPage, LessonPage,
)
from sessions import (
    TutorSession, HelpView, GrammarView, VocabularyView,
    get_or_create_session,
)
from tutor import ListFeed, load_page, load_items, format_conversation, format_grammar
from llm import generate_text, translate_text, GenerationError, TranslationError

router = APIRouter(prefix="/api", tags=["Tutor"])


def _session(response: Response, x_session_id: Optional[str]) -> TutorSession:
    session = get_or_create_session(x_session_id)
    response.headers["X-Session-Id"] = session.id
    return session


def _fail(session: TutorSession, status_code: int, detail: str) -> HTTPException:
    # Headers set on the injected Response are dropped when an HTTPException is raised.
    return HTTPException(status_code, detail, headers={"X-Session-Id": session.id})


def _require_view(session: TutorSession, kind: View):
    if session.view != kind:
        raise _fail(session, 409, f"The {kind.value} section is not open")


def _ensure_unchanged(session: TutorSession, opened):
    """Refuse to store a detail if the view was switched while it loaded."""
    if session.state is not opened:
        logger.warning("View changed during selection", extra={"session": session.id, "view": session.view.value})
        raise _fail(session, 409, "The view changed while the selection was loading")


async def _translate(text: str) -> str:
    return await translate_text(text, TARGET_LANGUAGE)


async def _fetch_scenarios() -> str:
    return await generate_text(SCENARIO_LIST_PROMPT)


async def _fetch_grammar_topics() -> str:
    return await generate_text(GRAMMAR_LIST_PROMPT)


def _feed_page(feed: ListFeed[str], added) -> FeedPage:
    return FeedPage(items=feed.items.to_list(), added=added, has_more=feed.has_more)


async def _load_lessons(session: TutorSession) -> LessonPage:
    async def _fetch():
        return [lesson for lesson in VOCABULARY_LESSONS if lesson not in session.lessons.items]

    added = await load_items(session.lessons, _fetch)
    return LessonPage(items=session.lessons.items.to_list(), added=added, has_more=session.lessons.has_more)


async def _load_current_view(session: TutorSession):
    if session.view == View.HELP:
        return _feed_page(session.scenarios, await load_page(session.scenarios, _fetch_scenarios))
    if session.view == View.GRAMMAR:
        return _feed_page(session.grammar_topics, await load_page(session.grammar_topics, _fetch_grammar_topics))
    if session.view == View.VOCABULARY:
        return await _load_lessons(session)
    return None


# --- Session & view ---

@router.post("/session", summary="Start a tutor session")
async def new_session(response: Response):
    session = get_or_create_session(None)
    response.headers["X-Session-Id"] = session.id
    return session.snapshot()


@router.get("/session", summary="Current session snapshot")
async def read_session(response: Response, x_session_id: Optional[str] = Header(default=None)):
    return _session(response, x_session_id).snapshot()


@router.post("/view", summary="Switch sidebar section")
async def switch_view(req: ViewRequest, response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    session.switch(req.view)
    logger.info("View switched", extra={"session": session.id, "view": req.view.value})
    page = await _load_current_view(session)
    return {
        "session_id": session.id,
        "state": session.state.model_dump(mode="json"),
        "page": page.model_dump() if page else None,
    }


@router.post("/view/back", summary="Return from a detail to its list")
async def view_back(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    session.back()
    return {"session_id": session.id, "state": session.state.model_dump(mode="json")}


# --- Scenarios ---

@router.post("/scenarios/next", response_model=FeedPage, summary="Load the next page of scenarios")
async def next_scenarios(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    return _feed_page(session.scenarios, await load_page(session.scenarios, _fetch_scenarios))


@router.post("/scenarios/refresh", response_model=FeedPage, summary="Start the scenario list over")
async def refresh_scenarios(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    session.scenarios.reset()
    if session.view == View.HELP:
        session.back()
    return _feed_page(session.scenarios, await load_page(session.scenarios, _fetch_scenarios))


@router.post("/scenarios/select", summary="Open the bilingual conversation for a scenario")
async def select_scenario(req: SelectLabelRequest, response: Response,
                          x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    if not req.label.strip():
        raise _fail(session, 400, "Scenario is required")
    _require_view(session, View.HELP)
    opened = session.state
    try:
        details = await generate_text(SCENARIO_DETAIL_PROMPT.format(scenario=req.label))
    except GenerationError as e:
        logger.error("Error fetching scenario details", extra={"session": session.id, "status_code": e.status_code, "detail": e.message})
        raise _fail(session, 502, SCENARIO_DETAIL_FAILED)

    lines = await format_conversation(details, _translate)
    _ensure_unchanged(session, opened)
    session.state = HelpView(selected=req.label, lines=lines)
    return session.state.model_dump(mode="json")


# --- Grammar ---

@router.post("/grammar/next", response_model=FeedPage, summary="Load the next page of grammar topics")
async def next_grammar_topics(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    return _feed_page(session.grammar_topics, await load_page(session.grammar_topics, _fetch_grammar_topics))


@router.post("/grammar/refresh", response_model=FeedPage, summary="Start the grammar topic list over")
async def refresh_grammar_topics(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    session.grammar_topics.reset()
    if session.view == View.GRAMMAR:
        session.back()
    return _feed_page(session.grammar_topics, await load_page(session.grammar_topics, _fetch_grammar_topics))


@router.post("/grammar/select", summary="Open the bilingual explanation of a grammar topic")
async def select_grammar_topic(req: SelectLabelRequest, response: Response,
                               x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    if not req.label.strip():
        raise _fail(session, 400, "Grammar topic is required")
    _require_view(session, View.GRAMMAR)
    opened = session.state
    try:
        details = await generate_text(GRAMMAR_DETAIL_PROMPT.format(topic=req.label))
    except GenerationError as e:
        logger.error("Error fetching grammar details", extra={"session": session.id, "status_code": e.status_code, "detail": e.message})
        raise _fail(session, 502, GRAMMAR_DETAIL_FAILED)

    paragraphs = await format_grammar(details, _translate)
    _ensure_unchanged(session, opened)
    session.state = GrammarView(selected=req.label, paragraphs=paragraphs)
    return session.state.model_dump(mode="json")


# --- Vocabulary ---

@router.post("/lessons/next", response_model=LessonPage, summary="Load the next page of vocabulary lessons")
async def next_lessons(response: Response, x_session_id: Optional[str] = Header(default=None)):
    return await _load_lessons(_session(response, x_session_id))


@router.post("/lessons/refresh", response_model=LessonPage, summary="Start the lesson list over")
async def refresh_lessons(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    session.lessons.reset()
    if session.view == View.VOCABULARY:
        session.back()
    return await _load_lessons(session)


@router.post("/lessons/select", summary="Open a vocabulary lesson with its translation")
async def select_lesson(req: SelectLessonRequest, response: Response,
                        x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    lesson = next((l for l in VOCABULARY_LESSONS if l.id == req.id), None)
    if lesson is None:
        raise _fail(session, 404, "Lesson not found")
    _require_view(session, View.VOCABULARY)
    opened = session.state

    content = LESSON_CONTENT_TEMPLATE.format(
        title=lesson.title, description=lesson.description.lower().rstrip("."),
    )
    try:
        translated = await _translate(content)
    except TranslationError as e:
        logger.error("Error fetching lesson content", extra={"session": session.id, "status_code": e.status_code, "detail": e.message})
        raise _fail(session, 502, LESSON_CONTENT_FAILED)

    _ensure_unchanged(session, opened)
    session.state = VocabularyView(selected=lesson, content=content, translated=translated)
    return session.state.model_dump(mode="json")


# --- Chat ---

@router.post("/chat", summary="Send a chat message to the tutor")
async def chat(req: ChatRequest, response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    text = req.message.strip()
    if not text:
        raise _fail(session, 400, "Message is required")

    session.add_message(req.message, "user")
    try:
        reply = await generate_text(SCENARIO_DETAIL_PROMPT.format(scenario=req.message))
    except GenerationError as e:
        logger.error("Error in chat", extra={"session": session.id, "status_code": e.status_code, "detail": e.message})
        bot = session.add_message(f"{CHAT_ERROR_PREFIX}{e.message}", "bot")
        return {"session_id": session.id, "reply": bot.model_dump(), "messages": [m.model_dump() for m in session.messages]}

    try:
        reply_text = await _translate(reply)
    except TranslationError as e:
        logger.warning("Chat reply left untranslated", extra={"session": session.id, "detail": e.message})
        reply_text = reply

    bot = session.add_message(reply_text, "bot")
    return {"session_id": session.id, "reply": bot.model_dump(), "messages": [m.model_dump() for m in session.messages]}


@router.get("/messages", summary="Chat history for this session")
async def list_messages(response: Response, x_session_id: Optional[str] = Header(default=None)):
    session = _session(response, x_session_id)
    return [m.model_dump() for m in session.messages]
