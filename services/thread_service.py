"""
Thread Service Module

This module splits full social text into a numbered thread of messages that
each fit a per-message character limit.

The header and footer each get their own message. Venue blocks in between are
packed whole, so a venue's movie list is only broken up when that one block is
too long for a message on its own.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from config import settings
from utils.exceptions import BudgetExceededError, ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)

SECTION_SEPARATOR = "---\n\n"
BLOCK_SEPARATOR = "\n\n"
THREAD_BOUNDARY = "\n\n======== NEXT POST ========\n\n"


@dataclass(frozen=True)
class ThreadChunk:
    """One message of a thread; body is an exact slice of the source text."""
    position: int
    total: int
    body: str

    @property
    def counter(self) -> str:
        return f"({self.position}/{self.total})"

    @property
    def text(self) -> str:
        """The message as posted: trimmed body followed by its counter."""
        return f"{self.body.rstrip()}\n\n{self.counter}"


def split_blocks(body: str) -> List[str]:
    """Split text after every blank line, keeping the separators attached."""
    if not body:
        return []
    parts = body.split(BLOCK_SEPARATOR)
    blocks = [part + BLOCK_SEPARATOR for part in parts[:-1]]
    if parts[-1]:
        blocks.append(parts[-1])
    return blocks


def format_thread(chunks: Sequence[ThreadChunk]) -> str:
    """Join rendered messages with the thread boundary marker."""
    return THREAD_BOUNDARY.join(chunk.text for chunk in chunks)


class ThreadChunker:
    """Splits full social text into length-bounded, numbered messages."""

    def __init__(self, limit: int = settings.TWITTER_CHARACTER_LIMIT,
                 counter_reserve: int = settings.THREAD_COUNTER_RESERVE):
        """
        Initialize the thread chunker.

        Args:
            limit: Maximum characters per message, counter included
            counter_reserve: Characters kept free for the "(i/N)" counter

        Raises:
            ConfigurationError: If the reserve leaves no room for content
        """
        if counter_reserve < 0 or limit <= counter_reserve:
            raise ConfigurationError(
                f"Thread limit {limit} must be greater than the counter reserve {counter_reserve}"
            )
        self.limit = limit
        self.counter_reserve = counter_reserve

    @property
    def effective_limit(self) -> int:
        return self.limit - self.counter_reserve

    def split_sections(self, full_text: str) -> Tuple[str, List[str], str]:
        """
        Split full text into its header, venue blocks and footer.

        The header runs up to and including the first separator line, the footer
        starts at the last one. Text without separators is all body.

        Args:
            full_text: Full-mode social text

        Returns:
            Tuple[str, List[str], str]: Header, body blocks and footer
        """
        header_end = full_text.find(SECTION_SEPARATOR)
        if header_end < 0:
            return "", split_blocks(full_text), ""

        body_start = header_end + len(SECTION_SEPARATOR)
        footer_start = full_text.rfind(SECTION_SEPARATOR)
        if footer_start == header_end:
            return full_text[:body_start], split_blocks(full_text[body_start:]), ""

        return (
            full_text[:body_start],
            split_blocks(full_text[body_start:footer_start]),
            full_text[footer_start:],
        )

    def _split_line(self, line: str) -> List[str]:
        size = self.effective_limit
        return [line[i:i + size] for i in range(0, len(line), size)]

    def _split_oversized(self, segment: str) -> List[str]:
        """Pack a too-long segment line by line."""
        lines = []
        for line in segment.splitlines(keepends=True):
            if len(line) > self.effective_limit:
                lines.extend(self._split_line(line))
            else:
                lines.append(line)
        return self._pack(lines, split=False)

    def _pack(self, segments: Sequence[str], split: bool = True) -> List[str]:
        bodies = []
        current = ""

        for segment in segments:
            if split and len(segment) > self.effective_limit:
                if current:
                    bodies.append(current)
                    current = ""
                logger.debug(f"Splitting a {len(segment)} character block line by line")
                bodies.extend(self._split_oversized(segment))
                continue

            if current and len(current) + len(segment) > self.effective_limit:
                bodies.append(current)
                current = ""
            current += segment

        if current:
            bodies.append(current)
        return bodies

    def chunk(self, full_text: str) -> List[ThreadChunk]:
        """
        Split full text into numbered thread messages.

        Args:
            full_text: Full-mode social text

        Returns:
            List[ThreadChunk]: Messages in posting order; their bodies join back
            into full_text

        Raises:
            BudgetExceededError: If a rendered message still exceeds the limit,
            e.g. when the counter outgrows its reserve
        """
        header, blocks, footer = self.split_sections(full_text)

        bodies = []
        if header:
            bodies.extend(self._pack([header]))
        bodies.extend(self._pack(blocks))
        if footer:
            bodies.extend(self._pack([footer]))

        total = len(bodies)
        chunks = [ThreadChunk(position=i + 1, total=total, body=body) for i, body in enumerate(bodies)]

        for chunk in chunks:
            if len(chunk.text) > self.limit:
                raise BudgetExceededError(
                    f"Thread message {chunk.counter} is {len(chunk.text)} characters, over the limit of {self.limit}"
                )

        logger.info(f"Split {len(full_text)} characters into a thread of {total} messages")
        return chunks
