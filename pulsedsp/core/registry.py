"""
Component Registry
==================

Name-based lookup for the engine's pluggable pieces.

Several quality heuristics have more than one accepted definition (two
clipping rules, two motion-artifact rules, two SNR estimators) and the
magnitude spectrum has two entry points. Each variant is registered under
its own name; configuration selects one per metric and the variants are
never blended.

Categories:
----------
- preprocessor: pipeline step classes
- snr_estimator: 'residual', 'direct'
- clipping_detector: 'peak_fraction', 'range_band'
- motion_detector: 'difference_std', 'abrupt_change_rate'
- spectral_transform: 'radix2', 'direct'

A registered class is instantiated (and initialized with the supplied
config) by create(); anything else is handed back as-is.

Example Usage:
    ```python
    from pulsedsp.core.registry import get_registry, registered

    @registered('motion_detector', 'peak_to_peak')
    def peak_to_peak_motion(signal):
        return float(np.ptp(signal))

    motion = get_registry().create('motion_detector', 'peak_to_peak')
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Dict, List, Optional, Any, Callable, Union
import logging
import threading

from pulsedsp.core.exceptions import ComponentNotFoundError, RegistrationError

logger = logging.getLogger(__name__)


CATEGORIES = (
    'preprocessor',
    'snr_estimator',
    'clipping_detector',
    'motion_detector',
    'spectral_transform',
)


class ComponentRegistry:
    """
    Process-wide table of components, keyed by (category, name).

    Only one instance exists; constructing the class again returns it.
    Mutations are guarded by a lock so worker threads may register
    strategies while others look them up.
    """

    _instance: Optional['ComponentRegistry'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ComponentRegistry':
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._entries = {category: {} for category in CATEGORIES}
                instance._info = {category: {} for category in CATEGORIES}
                cls._instance = instance
                logger.debug("ComponentRegistry initialized")
        return cls._instance

    @classmethod
    def get_instance(cls) -> 'ComponentRegistry':
        return cls()

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self,
                 category: str,
                 name: str,
                 component: Any,
                 metadata: Optional[Dict[str, Any]] = None,
                 overwrite: bool = False) -> 'ComponentRegistry':
        """
        Add a component under category/name.

        Args:
            category: One of CATEGORIES
            name: Name unique within the category
            component: Class or callable
            metadata: Extra descriptive fields (e.g. 'description')
            overwrite: Replace an existing entry instead of failing

        Returns:
            The registry, for chaining

        Raises:
            RegistrationError: Unknown category, or name taken without overwrite
        """
        if category not in self._entries:
            raise RegistrationError(
                category, name, f"Invalid category. Valid categories: {list(CATEGORIES)}"
            )

        with self._lock:
            if name in self._entries[category] and not overwrite:
                raise RegistrationError(
                    category, name,
                    "Component already registered. Use overwrite=True to replace."
                )

            info = {
                'name': name,
                'category': category,
                'type': 'class' if isinstance(component, type) else 'function',
                'module': getattr(component, '__module__', 'unknown'),
                'object_name': getattr(component, '__name__', repr(component)),
            }
            info.update(metadata or {})

            self._entries[category][name] = component
            self._info[category][name] = info

        logger.debug(f"Registered {category}/{name}")
        return self

    def unregister(self, category: str, name: str) -> 'ComponentRegistry':
        """Drop category/name if present."""
        with self._lock:
            removed = self._entries.get(category, {}).pop(name, None)
            self._info.get(category, {}).pop(name, None)

        if removed is not None:
            logger.debug(f"Unregistered {category}/{name}")
        return self

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get(self, category: str, name: str) -> Any:
        """
        Return the registered object itself.

        Raises:
            ComponentNotFoundError: If category/name is not registered
        """
        try:
            return self._entries[category][name]
        except KeyError:
            raise ComponentNotFoundError(category, name, self.list(category)) from None

    def create(self,
               category: str,
               name: str,
               config: Optional[Dict[str, Any]] = None,
               **kwargs) -> Any:
        """
        Resolve category/name into something usable.

        Classes are constructed with ``kwargs`` and, when they define
        initialize(), initialized with ``config``. Functions are returned
        unchanged.
        """
        component = self.get(category, name)
        if not isinstance(component, type):
            return component

        instance = component(**kwargs)
        initialize = getattr(instance, 'initialize', None)
        if callable(initialize):
            initialize(config or {})
        logger.debug(f"Created {category}/{name}")
        return instance

    def has(self, category: str, name: str) -> bool:
        return name in self._entries.get(category, {})

    def list(self, category: Optional[str] = None) -> Union[List[str], Dict[str, List[str]]]:
        """
        Names in one category, or a category -> names map of non-empty categories.
        """
        if category is not None:
            return list(self._entries.get(category, {}))
        return {cat: list(names) for cat, names in self._entries.items() if names}

    def get_metadata(self, category: str, name: str) -> Dict[str, Any]:
        return dict(self._info.get(category, {}).get(name, {}))

    def summary(self) -> str:
        """Readable listing of every registered component."""
        lines = ["Component Registry Summary", "=" * 40]
        for category in CATEGORIES:
            names = sorted(self._entries[category])
            if not names:
                continue
            lines.append(f"\n{category}:")
            for name in names:
                description = self._info[category][name].get('description', 'No description')
                lines.append(f"  - {name}: {description[:50]}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        total = sum(len(names) for names in self._entries.values())
        return f"ComponentRegistry(components={total})"


# =============================================================================
# MODULE-LEVEL HELPERS
# =============================================================================

def get_registry() -> ComponentRegistry:
    """Return the shared ComponentRegistry."""
    return ComponentRegistry.get_instance()


def create(category: str,
           name: str,
           config: Optional[Dict[str, Any]] = None,
           **kwargs) -> Any:
    """Shortcut for ``get_registry().create(...)``."""
    return get_registry().create(category, name, config, **kwargs)


def registered(category: str,
               name: Optional[str] = None,
               metadata: Optional[Dict[str, Any]] = None) -> Callable:
    """
    Decorator registering a class or function at definition time.

    Args:
        category: One of CATEGORIES
        name: Registry name (default: the object's lowercased __name__)
        metadata: Extra descriptive fields
    """
    def decorator(obj):
        get_registry().register(category, name or obj.__name__.lower(), obj, metadata)
        return obj

    return decorator
