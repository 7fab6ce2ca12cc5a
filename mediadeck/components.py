"""Application components and the registry that initializes and exports them."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Protocol

log = logging.getLogger(__name__)


class WebChannel(Protocol):
    def register_object(self, name: str, obj: Any) -> None: ...


class Component(ABC):
    """A named part of the application that can be initialized and exported."""

    post_initialized: bool = False

    @abstractmethod
    def component_initialize(self) -> bool:
        """Set the component up; return whether it succeeded."""

    @abstractmethod
    def component_name(self) -> str:
        """Unique name the component is registered under."""

    @abstractmethod
    def component_export(self) -> bool:
        """Whether the component is exposed on the web channel."""

    def component_post_initialize(self) -> None:
        """Run after all components are initialized; marks the component as ready."""
        self.post_initialized = True


class ComponentManager:
    """Registers components by name and exposes them to the UI layer."""

    def __init__(self) -> None:
        self.components: dict[str, Component] = {}
        self.properties: dict[str, Component] = {}

    def register_component(self, component: Component) -> bool:
        """Initialize and register ``component``; return whether it was added."""
        name = component.component_name()
        if name in self.components:
            log.error("Component %s already registered!", name)
            return False

        if not component.component_initialize():
            log.error("Failed to init component: %s", name)
            return False

        log.info("Component: %s inited", name)
        self.components[name] = component
        self.properties[name] = component
        return True

    def _in_order(self) -> list[Component]:
        return [self.components[name] for name in sorted(self.components)]

    def initialize(self, components: Iterable[Component]) -> None:
        """Register every component in order, then post-initialize the registered ones."""
        for component in components:
            self.register_component(component)
        for component in self._in_order():
            component.component_post_initialize()

    def set_web_channel(self, channel: WebChannel) -> None:
        """Register every exported component on ``channel``."""
        for component in self._in_order():
            if component.component_export():
                log.debug("Adding component: %s to webchannel", component.component_name())
                channel.register_object(component.component_name(), component)

    def get(self, name: str) -> Component:
        """Return the registered component called ``name``; KeyError if absent."""
        return self.components[name]