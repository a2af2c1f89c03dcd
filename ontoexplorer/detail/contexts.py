"""
Context highlighting.

Occurrences of the focus element inside the before/after text of a context
are marked so a view can make them clickable. Clicking one feeds the marked
text to the navigation loop.
"""
import html
import re
from dataclasses import dataclass, field
from typing import List

from ..types import Context


@dataclass(frozen=True)
class Segment:
    text: str
    highlighted: bool = False


@dataclass(frozen=True)
class HighlightedContext:
    """A context split into plain and highlighted segments."""
    before: List[Segment] = field(default_factory=list)
    element_text: str = ""
    after: List[Segment] = field(default_factory=list)
    position: int = 0

    @property
    def terms(self) -> List[str]:
        """Texts a user can activate, in reading order."""
        terms = [s.text for s in self.before if s.highlighted]
        if self.element_text:
            terms.append(self.element_text)
        terms.extend(s.text for s in self.after if s.highlighted)
        return terms

    def to_html(self) -> str:
        """Escaped markup with activatable terms wrapped in <mark>."""
        before = _segments_html(self.before)
        after = _segments_html(self.after)
        element = f"<mark>{html.escape(self.element_text)}</mark>" if self.element_text else ""
        return " ".join(part for part in (before, element, after) if part)

    def to_text(self) -> str:
        before = "".join(_bracket(s) for s in self.before)
        after = "".join(_bracket(s) for s in self.after)
        element = f"[{self.element_text}]" if self.element_text else ""
        return " ".join(part for part in (before, element, after) if part)


def _bracket(segment: Segment) -> str:
    return f"[{segment.text}]" if segment.highlighted else segment.text


def _segments_html(segments: List[Segment]) -> str:
    parts = []
    for segment in segments:
        escaped = html.escape(segment.text)
        parts.append(f"<mark>{escaped}</mark>" if segment.highlighted else escaped)
    return "".join(parts)


def highlight_text(text: str, element_name: str) -> List[Segment]:
    """Split ``text`` around case-insensitive occurrences of ``element_name``."""
    if not text:
        return []
    if not element_name.strip():
        return [Segment(text)]

    pattern = re.compile(re.escape(element_name), re.IGNORECASE)
    segments = []
    cursor = 0
    for match in pattern.finditer(text):
        if match.start() > cursor:
            segments.append(Segment(text[cursor:match.start()]))
        segments.append(Segment(match.group(0), highlighted=True))
        cursor = match.end()
    if cursor < len(text):
        segments.append(Segment(text[cursor:]))
    return segments


def highlight_context(context: Context, element_name: str) -> HighlightedContext:
    return HighlightedContext(
        before=highlight_text(" ".join(context.before_tokens), element_name),
        element_text=context.element_text,
        after=highlight_text(" ".join(context.after_tokens), element_name),
        position=context.position,
    )


def highlight_contexts(contexts: List[Context], element_name: str) -> List[HighlightedContext]:
    return [highlight_context(context, element_name) for context in contexts]
