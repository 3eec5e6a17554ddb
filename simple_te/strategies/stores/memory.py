"""In-memory template store, for tests and throwaway sessions."""

from simple_te.interfaces.store import BaseTemplateStore


class MemoryTemplateStore(BaseTemplateStore):
    """Keeps the template text in process memory."""

    def __init__(self, initial: str | None = None) -> None:
        self._text = initial
        self.save_count = 0

    def load_template_text(self) -> str | None:
        return self._text

    def save_template_text(self, text: str) -> None:
        self._text = text
        self.save_count += 1
