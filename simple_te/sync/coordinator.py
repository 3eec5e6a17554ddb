"""Sync coordinator.

Wires extraction, reconciliation and rendering to a stream of user edits.
Template and value edits are debounced per stream; settled edits are queued
as commit events and applied one at a time on the event loop. Rendering is
synchronous and runs after every state change.

The debounced edit methods (edit_text, edit_value) need a running asyncio
loop and are meant for asyncio hosts. Hosts that already settle input on
their own, such as the Streamlit callbacks in frontend/app.py, call
replace_text and commit_value directly.
"""

import asyncio
import contextlib
import logging
from collections.abc import Mapping

from simple_te.interfaces.extractor import BaseExtractor
from simple_te.interfaces.presenter import BasePresenter
from simple_te.interfaces.renderer import BaseRenderer
from simple_te.interfaces.store import BaseTemplateStore
from simple_te.sync.debounce import Debouncer
from simple_te.sync.editing import insert_placeholder
from simple_te.sync.models import (
    CommitEvent,
    CoordinatorState,
    SyncSnapshot,
    TemplateCommit,
    ValueCommit,
)
from simple_te.sync.reconciler import clear_values, reconcile

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "\n{{hello}}\n"
DEFAULT_PARSE_ERROR_MESSAGE = "There is invalid variable"

TEMPLATE_KEY = "template"
VALUE_KEY_PREFIX = "value:"


class SyncCoordinator:
    """Keeps template text, variable store and rendered output consistent.

    The coordinator owns no parsing or rendering logic: it schedules work,
    feeds each component and publishes the result to the presenter.

    Example:
        ```python
        async with SyncCoordinator(extractor, renderer, store) as session:
            session.edit_text("Hi {{name}}")
            session.edit_value("name", "Ada")
            await session.wait_idle()
            session.output  # "Hi Ada"
        ```
    """

    def __init__(
        self,
        extractor: BaseExtractor,
        renderer: BaseRenderer,
        store: BaseTemplateStore,
        presenter: BasePresenter | None = None,
        debounce_seconds: float = 0.5,
        default_template: str = DEFAULT_TEMPLATE,
        parse_error_message: str = DEFAULT_PARSE_ERROR_MESSAGE,
    ) -> None:
        """Initialize the coordinator and render the stored template.

        Args:
            extractor: Placeholder extraction strategy.
            renderer: Rendering strategy.
            store: Persistence for the template text.
            presenter: Optional view notified after every change.
            debounce_seconds: Quiet period before an edit is committed.
            default_template: Text used when the store has nothing saved.
            parse_error_message: Validation message shown for bad syntax.
        """
        self._extractor = extractor
        self._renderer = renderer
        self._store = store
        self._presenter = presenter
        self._parse_error_message = parse_error_message

        self._debouncer: Debouncer[CommitEvent] = Debouncer(debounce_seconds, self._deliver)
        self._queue: asyncio.Queue[CommitEvent] | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._in_flight = 0

        loaded = store.load_template_text()
        self._raw_text = loaded if loaded is not None else default_template
        self._text = ""
        self._values: dict[str, str] = {}
        self._output = ""
        self._error: str | None = None
        self._error_detail: str | None = None

        logger.info(
            f"SyncCoordinator initialized: debounce={debounce_seconds}s, "
            f"restored={loaded is not None}"
        )
        self.commit_text(self._raw_text)

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def raw_text(self) -> str:
        return self._raw_text

    @property
    def text(self) -> str:
        return self._text

    @property
    def variables(self) -> tuple[str, ...]:
        return tuple(self._values)

    @property
    def values(self) -> Mapping[str, str]:
        return dict(self._values)

    @property
    def output(self) -> str:
        return self._output

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def state(self) -> CoordinatorState:
        if self._in_flight or self._debouncer.is_pending():
            return CoordinatorState.PENDING
        return CoordinatorState.IDLE

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            raw_text=self._raw_text,
            text=self._text,
            variables=list(self._values),
            values=dict(self._values),
            output=self._output,
            error=self._error,
            error_detail=self._error_detail,
            state=self.state,
        )

    # =========================================================================
    # Debounced edits
    # =========================================================================

    def edit_text(self, text: str) -> None:
        """Record a template edit and schedule its commit.

        The raw text updates and is persisted immediately; extraction and
        reconciliation wait for the debounce window to settle.
        """
        self._require_running()
        self._set_raw_text(text)
        self._debouncer.submit(TEMPLATE_KEY, TemplateCommit(text))

    def edit_value(self, name: str, value: str) -> None:
        """Schedule a value commit on the per-variable debounce timer."""
        self._require_running()
        self._debouncer.submit(VALUE_KEY_PREFIX + name, ValueCommit(name, value))

    def clear_text(self) -> None:
        self.edit_text("")

    def insert_placeholder(
        self, start: int, end: int | None = None, immediate: bool = False
    ) -> int:
        """Replace the selection in the raw text with ``{{}}``.

        Args:
            start: Selection start offset in the raw text.
            end: Selection end offset; defaults to ``start``.
            immediate: Commit without debouncing (for hosts without a loop).

        Returns:
            Caret offset between the inserted braces.
        """
        result = insert_placeholder(self._raw_text, start, end)
        if immediate:
            self.replace_text(result.text)
        else:
            self.edit_text(result.text)
        return result.cursor

    # =========================================================================
    # Immediate commits
    # =========================================================================

    def replace_text(self, text: str) -> None:
        """Set, persist and commit the template text without debouncing."""
        self._debouncer.cancel(TEMPLATE_KEY)
        self._set_raw_text(text)
        self.commit_text(text)

    def commit_text(self, text: str) -> None:
        """Apply settled template text.

        On a parse error the variable store is kept unchanged and the
        validation message is set; the output is re-rendered either way.
        """
        self._text = text
        result = self._extractor.extract(text)

        if result.ok:
            self._values = reconcile(result.variables, self._values)
            self._error = None
            self._error_detail = None
            logger.debug(f"Template committed with {len(self._values)} variables")
        else:
            self._error = self._parse_error_message
            self._error_detail = result.error
            logger.info(f"Template extraction unavailable: {result.error}")

        self._render_and_publish()

    def commit_value(self, name: str, value: str) -> bool:
        """Apply a settled value for one variable.

        Returns:
            False if ``name`` is no longer a variable of the template, in
            which case nothing changes.
        """
        if name not in self._values:
            logger.debug(f"Dropping value for unknown variable '{name}'")
            return False

        if self._values[name] != value:
            self._values = {**self._values, name: value}
            self._render_and_publish()
        return True

    def clear_values(self) -> None:
        """Reset every variable to the empty string, discarding pending edits."""
        self._debouncer.cancel_matching(lambda key: key.startswith(VALUE_KEY_PREFIX))
        self._values = clear_values(self._values)
        self._render_and_publish()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start consuming settled commit events on the running loop."""
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._in_flight = 0
        self._consumer = asyncio.get_running_loop().create_task(self._consume(self._queue))
        logger.debug("SyncCoordinator started")

    async def stop(self) -> None:
        """Cancel pending timers and the consumer; unapplied edits are dropped."""
        self._debouncer.cancel_all()
        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer
        self._queue = None
        self._in_flight = 0
        logger.debug("SyncCoordinator stopped")

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and every settled event is applied."""
        while True:
            timers = self._debouncer.pending_timers()
            if timers:
                await asyncio.gather(*timers, return_exceptions=True)
                continue
            if self._in_flight and self._queue is not None:
                await self._queue.join()
                continue
            return

    async def __aenter__(self) -> "SyncCoordinator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_running(self) -> None:
        if not self.running:
            raise RuntimeError("SyncCoordinator is not started; use 'async with' or start()")

    def _set_raw_text(self, text: str) -> None:
        self._raw_text = text
        self._store.save_template_text(text)

    def _deliver(self, event: CommitEvent) -> None:
        if self._queue is None:
            logger.debug(f"Discarding commit after stop: {event!r}")
            return
        self._in_flight += 1
        self._queue.put_nowait(event)

    async def _consume(self, queue: asyncio.Queue[CommitEvent]) -> None:
        while True:
            event = await queue.get()
            try:
                self._apply(event)
            finally:
                self._in_flight -= 1
                queue.task_done()

    def _apply(self, event: CommitEvent) -> None:
        match event:
            case TemplateCommit(text=text):
                self.commit_text(text)
            case ValueCommit(name=name, value=value):
                self.commit_value(name, value)

    def _render_and_publish(self) -> None:
        self._output = self._renderer.render(self._text, self._values)

        if self._presenter is not None:
            self._presenter.show_variables(list(self._values))
            self._presenter.show_output(self._output)
            self._presenter.show_error(self._error)
