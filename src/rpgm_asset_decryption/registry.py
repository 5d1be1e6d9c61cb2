"""Key source registry for building key discovery chains.

This module provides a central registry of key source factories. Key
sources register themselves when their module is imported, and the
registry builds the ordered chain used to discover a game's key.
"""

import importlib
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from .sources.base import KeySource


# Order in which key sources are tried when no key is given explicitly
DEFAULT_CHAIN = ("manifest", "executable", "png-header")


class KeySourceRegistry:
    """Central registry for key source factories.

    Sources register a factory under their name when imported. The
    registry keeps key discovery decoupled from the individual sources,
    so a chain can be assembled from names alone.
    """

    _factories: dict[str, Callable[..., "KeySource"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "KeySource"]) -> None:
        """Register a factory function for creating key sources.

        Args:
            name: Name of the key source (e.g., 'manifest', 'executable')
            factory: Callable that creates a KeySource instance

        Example:
            >>> KeySourceRegistry.register_factory('manifest', ManifestKeySource)
        """
        cls._factories[name] = factory

    @classmethod
    def create_source(cls, source_name: str, **kwargs) -> "KeySource":
        """Create a key source by name.

        Args:
            source_name: Name of the registered key source
            **kwargs: Arguments passed to the source factory

        Returns:
            The created key source

        Raises:
            ValueError: If source_name is not registered
        """
        cls.discover_sources()

        if source_name not in cls._factories:
            available = ", ".join(cls._factories.keys()) or "none"
            raise ValueError(
                f"Unknown key source: '{source_name}'. Available sources: {available}"
            )

        return cls._factories[source_name](**kwargs)

    @classmethod
    def create_chain(
        cls,
        names: tuple[str, ...] = DEFAULT_CHAIN,
        explicit_key: str | None = None,
        options: dict[str, dict[str, Any]] | None = None,
    ) -> list["KeySource"]:
        """Build the ordered list of key sources to try.

        Args:
            names: Registered source names, most trusted first
            explicit_key: A user supplied hex key. When given it is the
                only source, so a wrong key is never silently replaced.
            options: Keyword arguments per source name, e.g.
                ``{"manifest": {"verbose": True}}``

        Returns:
            Key sources in the order they should be tried

        Raises:
            KeyMalformed: If ``explicit_key`` is not a valid key
        """
        if explicit_key is not None:
            return [cls.create_source("explicit", raw_key=explicit_key)]
        options = options or {}
        return [cls.create_source(name, **options.get(name, {})) for name in names]

    @classmethod
    def list_sources(cls) -> list[str]:
        """List all registered key source names.

        Example:
            >>> KeySourceRegistry.list_sources()
            ['explicit', 'manifest', 'executable', 'png-header']
        """
        cls.discover_sources()
        return list(cls._factories.keys())

    @classmethod
    def discover_sources(cls) -> None:
        """Import the bundled key sources so they register themselves."""
        importlib.import_module(".sources", package="rpgm_asset_decryption")
