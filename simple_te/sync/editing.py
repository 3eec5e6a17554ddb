"""Text editing helpers for the template input."""

from dataclasses import dataclass

EMPTY_PLACEHOLDER = "{{}}"


@dataclass(frozen=True)
class InsertResult:
    """Template text after an insertion.

    Attributes:
        text: The new template text.
        cursor: Offset where the caret should go so the user can type the
            variable name between the braces.
    """

    text: str
    cursor: int


def insert_placeholder(text: str, start: int, end: int | None = None) -> InsertResult:
    """Replace the selection ``[start, end)`` with an empty placeholder.

    Offsets outside the text are clamped and a reversed selection is
    normalized.

    Args:
        text: Current template text.
        start: Selection start offset.
        end: Selection end offset. Defaults to ``start`` (no selection).

    Returns:
        The new text and the caret offset inside the inserted braces.
    """
    if end is None:
        end = start
    start = max(0, min(start, len(text)))
    end = max(0, min(end, len(text)))
    if end < start:
        start, end = end, start

    new_text = text[:start] + EMPTY_PLACEHOLDER + text[end:]
    return InsertResult(text=new_text, cursor=start + 2)
