"""Paginated label feeds and per-unit translation fan-out.

A feed accumulates labels from repeated, stateless generation calls. The
model may return the same list every time, so de-duplication happens here:
labels are kept once, in first-seen order, and an empty page is the only
signal that nothing more is coming.

Detail text (a conversation or a grammar explanation) is split into units
and every unit is translated concurrently. A failed unit keeps its source
text and carries the error instead of a translation; the batch never fails
as a whole.
"""
import os
import asyncio
from typing import Awaitable, Callable, Generic, Hashable, Iterable, Iterator, List, Optional, TypeVar

from log import get_logger

logger = get_logger("englishmate.tutor")

from llm import GenerationError, TranslationError
from models import CONVERSATION_DELIMITER, GRAMMAR_DELIMITER, ConversationLine

T = TypeVar("T")

# 0 means unlimited
TRANSLATE_CONCURRENCY = int(os.environ.get("TRANSLATE_CONCURRENCY", "0"))

Fetch = Callable[[], Awaitable[str]]
Translate = Callable[[str], Awaitable[str]]


class UniqueList(Generic[T]):
    """Ordered collection that ignores items whose key it has already seen."""

    def __init__(self, items: Iterable[T] = (), key: Optional[Callable[[T], Hashable]] = None):
        self._key = key or (lambda item: item)
        self._items: List[T] = []
        self._seen: set = set()
        self.extend(items)

    def add(self, item: T) -> bool:
        k = self._key(item)
        if k in self._seen:
            return False
        self._seen.add(k)
        self._items.append(item)
        return True

    def extend(self, items: Iterable[T]) -> List[T]:
        """Insert every unseen item; return the ones that were inserted."""
        return [item for item in items if self.add(item)]

    def clear(self):
        self._items.clear()
        self._seen.clear()

    def __contains__(self, item) -> bool:
        return self._key(item) in self._seen

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self) -> List[T]:
        return list(self._items)


class ListFeed(Generic[T]):
    def __init__(self, name: str, key: Optional[Callable[[T], Hashable]] = None):
        self.name = name
        self.items: UniqueList[T] = UniqueList(key=key)
        self.has_more = True

    def reset(self):
        self.items.clear()
        self.has_more = True


def parse_labels(text: str) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


async def load_page(feed: ListFeed[str], fetch: Fetch) -> List[str]:
    """Fetch one page of newline-separated labels and merge it into `feed`.

    Returns the labels that were not already present. Generation failures
    stop pagination instead of propagating.
    """
    try:
        text = await fetch()
    except GenerationError as e:
        logger.warning("Page fetch failed, stopping pagination", extra={
            "component": feed.name, "status_code": e.status_code, "detail": e.message,
        })
        feed.has_more = False
        return []

    labels = parse_labels(text)
    if not labels:
        feed.has_more = False
    added = feed.items.extend(labels)
    logger.info("Page loaded", extra={"component": feed.name, "count": len(added), "detail": f"{len(labels)} fetched"})
    return added


async def load_items(feed: ListFeed[T], fetch: Callable[[], Awaitable[List[T]]]) -> List[T]:
    """Like load_page, for fetches that already return parsed items."""
    items = await fetch()
    if not items:
        feed.has_more = False
    return feed.items.extend(items)


def split_units(text: str, delimiter: str) -> List[str]:
    return [unit.strip() for unit in (text or "").split(delimiter) if unit.strip()]


async def translate_units(units: List[str], translate: Translate,
                          concurrency: Optional[int] = None) -> List[ConversationLine]:
    """Translate every unit concurrently, preserving input order."""
    if concurrency is None:
        concurrency = TRANSLATE_CONCURRENCY
    semaphore = asyncio.Semaphore(concurrency) if concurrency > 0 else None

    async def _one(unit: str) -> ConversationLine:
        try:
            if semaphore is None:
                translated = await translate(unit)
            else:
                async with semaphore:
                    translated = await translate(unit)
        except TranslationError as e:
            logger.warning("Translation failed for unit", extra={
                "component": "formatter", "status_code": e.status_code, "detail": e.message,
            })
            return ConversationLine(source=unit, error=e.message)
        return ConversationLine(source=unit, translated=translated)

    return list(await asyncio.gather(*(_one(unit) for unit in units)))


async def format_conversation(text: str, translate: Translate) -> List[ConversationLine]:
    return await translate_units(split_units(text, CONVERSATION_DELIMITER), translate)


async def format_grammar(text: str, translate: Translate) -> List[ConversationLine]:
    return await translate_units(split_units(text, GRAMMAR_DELIMITER), translate)
