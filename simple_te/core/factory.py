"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from simple_te.core.config import Settings, get_settings
from simple_te.interfaces.extractor import BaseExtractor
from simple_te.interfaces.presenter import BasePresenter
from simple_te.interfaces.renderer import BaseRenderer
from simple_te.interfaces.store import BaseTemplateStore
from simple_te.strategies.extractors import ExtractionRule, HandlebarsExtractor
from simple_te.strategies.renderers import HandlebarsRenderer
from simple_te.strategies.stores import JsonFileTemplateStore, MemoryTemplateStore
from simple_te.sync.coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        extractor = factory.get_extractor()
        renderer = factory.get_renderer()
        coordinator = factory.create_coordinator()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._extractor_cache: BaseExtractor | None = None
        self._renderer_cache: BaseRenderer | None = None
        self._template_store_cache: BaseTemplateStore | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_extractor(self, extraction_rule: str | None = None) -> BaseExtractor:
        """Get a placeholder extractor for the configured naming rule.

        Args:
            extraction_rule: The rule to use. If None, uses settings.

        Returns:
            A BaseExtractor implementation instance.

        Raises:
            ValueError: If the extraction rule is unknown.
        """
        if self._extractor_cache is None or extraction_rule is not None:
            extraction_rule = extraction_rule or self._settings.extraction_rule

            logger.info(f"Instantiating extractor: handlebars ({extraction_rule})")

            try:
                rule = ExtractionRule(extraction_rule)
            except ValueError:
                valid = ", ".join(f"'{r.value}'" for r in ExtractionRule)
                raise ValueError(
                    f"Unknown extraction rule: {extraction_rule}. Valid options: {valid}"
                ) from None

            self._extractor_cache = HandlebarsExtractor(rule=rule)

        return self._extractor_cache

    def get_renderer(self) -> BaseRenderer:
        """Get a renderer sharing the factory's extractor.

        Returns:
            A BaseRenderer implementation instance.
        """
        if self._renderer_cache is None:
            logger.info("Instantiating renderer: handlebars")

            self._renderer_cache = HandlebarsRenderer(extractor=self.get_extractor())

        return self._renderer_cache

    def get_template_store(self, template_store_type: str | None = None) -> BaseTemplateStore:
        """Get a template store instance based on the specified type.

        Args:
            template_store_type: The store type to instantiate. If None, uses settings.

        Returns:
            A BaseTemplateStore implementation instance.

        Raises:
            ValueError: If the store type is unknown.
        """
        if self._template_store_cache is None or template_store_type is not None:
            template_store_type = template_store_type or self._settings.template_store_type

            logger.info(f"Instantiating template store: {template_store_type}")

            match template_store_type:
                case "json_file":
                    self._template_store_cache = JsonFileTemplateStore(
                        path=self._settings.template_store_path,
                        key=self._settings.template_store_key,
                    )
                case "memory":
                    self._template_store_cache = MemoryTemplateStore()
                case _:
                    raise ValueError(
                        f"Unknown template store type: {template_store_type}. "
                        f"Valid options: 'json_file', 'memory'"
                    )

        return self._template_store_cache

    def create_coordinator(self, presenter: BasePresenter | None = None) -> SyncCoordinator:
        """Create a new sync session wired to the cached components.

        Args:
            presenter: Optional view notified after every change.

        Returns:
            A SyncCoordinator with the configured template already rendered.
        """
        return SyncCoordinator(
            extractor=self.get_extractor(),
            renderer=self.get_renderer(),
            store=self.get_template_store(),
            presenter=presenter,
            debounce_seconds=self._settings.debounce_seconds,
            default_template=self._settings.default_template,
            parse_error_message=self._settings.parse_error_message,
        )

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._extractor_cache = None
        self._renderer_cache = None
        self._template_store_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
