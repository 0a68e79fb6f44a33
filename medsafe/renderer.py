from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

BULLET_MARKER = "- "


class LineKind(str, Enum):
    HEADING = "heading"
    BULLET = "bullet"
    PARAGRAPH = "paragraph"
    BLANK = "blank"


@dataclass(frozen=True)
class RenderedLine:
    kind: LineKind
    text: str = ""


def classify_line(line: str, headings: Iterable[str]) -> RenderedLine:
    trimmed = line.strip()
    if not trimmed:
        return RenderedLine(LineKind.BLANK)
    if trimmed in headings:
        return RenderedLine(LineKind.HEADING, trimmed)
    if trimmed.startswith(BULLET_MARKER):
        return RenderedLine(LineKind.BULLET, trimmed[len(BULLET_MARKER):])
    return RenderedLine(LineKind.PARAGRAPH, trimmed)


def render_message(text: str, headings: Iterable[str]) -> List[RenderedLine]:
    heading_set = frozenset(headings)
    return [classify_line(line, heading_set) for line in (text or "").split("\n")]


def to_text(lines: Iterable[RenderedLine]) -> str:
    out = []
    for line in lines:
        if line.kind == LineKind.HEADING:
            out.append(line.text.upper())
        elif line.kind == LineKind.BULLET:
            out.append(f"  • {line.text}")
        else:
            out.append(line.text)
    return "\n".join(out)
