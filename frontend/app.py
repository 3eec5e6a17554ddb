"""Streamlit frontend for Template String.

Type a Handlebars template, fill one field per variable and copy the
rendered result. The template text is saved between sessions.
"""

import logging

import streamlit as st
import structlog

from simple_te.core.config import get_settings
from simple_te.core.factory import ComponentFactory
from simple_te.core.logging_config import setup_logging
from simple_te.interfaces.presenter import BasePresenter
from simple_te.sync.coordinator import SyncCoordinator

settings = get_settings()

# Page config
st.set_page_config(
    page_title=settings.page_title,
    page_icon="📝",
    layout="wide",
)

# Configure logging
setup_logging(settings)
logger = logging.getLogger(__name__)
events = structlog.get_logger("simple_te.frontend")

TEMPLATE_WIDGET_KEY = "template_text"
VARIABLE_WIDGET_PREFIX = "variable:"


# =============================================================================
# Presenter
# =============================================================================


class SessionStatePresenter(BasePresenter):
    """Mirrors coordinator updates into Streamlit session state."""

    def show_variables(self, variables: list[str]) -> None:
        st.session_state.variables = variables

    def show_output(self, output: str) -> None:
        st.session_state.output = output

    def show_error(self, message: str | None) -> None:
        st.session_state.template_error = message


def get_coordinator() -> SyncCoordinator:
    """Return this session's coordinator, creating it on first run."""
    if "coordinator" not in st.session_state:
        factory = ComponentFactory(settings)
        st.session_state.coordinator = factory.create_coordinator(
            presenter=SessionStatePresenter()
        )
        events.info("session_started", variables=len(st.session_state.variables))
    return st.session_state.coordinator


def variable_key(name: str) -> str:
    return VARIABLE_WIDGET_PREFIX + name


# =============================================================================
# Callbacks
# =============================================================================


def on_template_change() -> None:
    coordinator = get_coordinator()
    coordinator.replace_text(st.session_state[TEMPLATE_WIDGET_KEY])
    logger.debug(f"Template changed: {len(coordinator.variables)} variables")


def on_insert_variable() -> None:
    coordinator = get_coordinator()
    # Streamlit does not expose the caret, so insert at the end
    end = len(coordinator.raw_text)
    coordinator.insert_placeholder(end, immediate=True)
    st.session_state[TEMPLATE_WIDGET_KEY] = coordinator.raw_text
    events.info("variable_inserted", offset=end)


def on_clear_template() -> None:
    coordinator = get_coordinator()
    coordinator.replace_text("")
    st.session_state[TEMPLATE_WIDGET_KEY] = ""


def on_variable_change(name: str) -> None:
    coordinator = get_coordinator()
    if not coordinator.commit_value(name, st.session_state[variable_key(name)]):
        logger.debug(f"Ignored value for stale variable '{name}'")


def on_clear_values() -> None:
    coordinator = get_coordinator()
    coordinator.clear_values()
    for name in coordinator.variables:
        st.session_state[variable_key(name)] = ""
    events.info("values_cleared", variables=len(coordinator.variables))


# =============================================================================
# UI Components
# =============================================================================


def render_template_input(coordinator: SyncCoordinator) -> None:
    """Render the template editor card."""
    with st.container(border=True):
        col1, col2 = st.columns([1, 1])
        with col1:
            st.button("Insert Variable", on_click=on_insert_variable)
        with col2:
            if coordinator.raw_text:
                st.button("🗑️ Clear", key="clear_template", on_click=on_clear_template)

        if TEMPLATE_WIDGET_KEY not in st.session_state:
            st.session_state[TEMPLATE_WIDGET_KEY] = coordinator.raw_text

        st.text_area(
            "Text Message",
            key=TEMPLATE_WIDGET_KEY,
            height=240,
            on_change=on_template_change,
        )

        error = st.session_state.get("template_error")
        if error:
            st.error(error)


def render_result(coordinator: SyncCoordinator) -> None:
    """Render the read-only result card with its copy button."""
    with st.container(border=True):
        st.caption("Result")
        st.code(coordinator.output, language=None)


def render_variables(coordinator: SyncCoordinator) -> None:
    """Render one input per variable, or nothing if there are none."""
    variables = st.session_state.get("variables", [])
    if not variables:
        return

    values = coordinator.values
    with st.container(border=True):
        col1, col2 = st.columns([3, 1])
        with col1:
            st.markdown("**Variables**")
        with col2:
            st.button("🗑️ Clear", key="clear_values", type="secondary", on_click=on_clear_values)

        for name in variables:
            key = variable_key(name)
            # Widget state may be stale after the variable was dropped and re-added
            if st.session_state.get(key) != values.get(name, ""):
                st.session_state[key] = values.get(name, "")
            st.text_input(name, key=key, on_change=on_variable_change, args=(name,))


# =============================================================================
# Main App
# =============================================================================


def main() -> None:
    """Main application entry point."""
    coordinator = get_coordinator()

    st.title(settings.page_title)

    col1, col2 = st.columns(2)
    with col1:
        render_template_input(coordinator)
    with col2:
        render_result(coordinator)

    st.divider()

    render_variables(coordinator)


if __name__ == "__main__":
    main()
