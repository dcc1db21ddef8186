"""Pydantic schemas, constants, prompts and seed data for EnglishMate."""
import os
from enum import Enum
from typing import Literal, Optional, List
from pydantic import BaseModel

# --- Constants ---
TARGET_LANGUAGE = os.environ.get("ENGLISHMATE_TARGET_LANG", "bn")
TARGET_LANGUAGE_LABEL = "বাংলা"

CONVERSATION_DELIMITER = "\n"
GRAMMAR_DELIMITER = "\n\n"

# --- Prompts ---
SCENARIO_LIST_PROMPT = "Suggest a list of common English conversation scenarios or English conversation cases."
SCENARIO_DETAIL_PROMPT = 'Provide an English conversation for the scenario: "{scenario}".'
GRAMMAR_LIST_PROMPT = "Provide a list of essential English grammar topics for beginners."
GRAMMAR_DETAIL_PROMPT = 'Explain the English grammar topic: "{topic}". Provide examples.'
LESSON_CONTENT_TEMPLATE = (
    'This is the content for the lesson: "{title}". '
    "Here you will learn various aspects related to {description}."
)

# --- User-facing failure messages ---
SCENARIO_DETAIL_FAILED = "Failed to load conversation details. Please try again."
GRAMMAR_DETAIL_FAILED = "Failed to load grammar details. Please try again."
LESSON_CONTENT_FAILED = "Failed to load lesson content. Please try again."
CHAT_ERROR_PREFIX = "Error retrieving response: "


class View(str, Enum):
    HELP = "help"
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    CHAT = "chat"


# --- Pydantic Models ---

class Lesson(BaseModel):
    id: int
    title: str
    description: str


class ConversationLine(BaseModel):
    """One source unit and its translation; exactly one of translated/error is set."""
    source: str
    translated: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Message(BaseModel):
    text: str
    sender: Literal["user", "bot"]


class ViewRequest(BaseModel):
    view: View


class SelectLabelRequest(BaseModel):
    label: str


class SelectLessonRequest(BaseModel):
    id: int


class ChatRequest(BaseModel):
    message: str


class FeedPage(BaseModel):
    items: List[str]
    added: List[str]
    has_more: bool


class LessonPage(BaseModel):
    items: List[Lesson]
    added: List[Lesson]
    has_more: bool


# --- Seed Data ---

VOCABULARY_LESSONS = [
    Lesson(id=1, title="Common Greetings", description="Learn how to greet people in English."),
    Lesson(id=2, title="Food Vocabulary", description="Words related to food and dining."),
    Lesson(id=3, title="Travel Phrases", description="Useful phrases when traveling abroad."),
]
