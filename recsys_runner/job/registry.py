"""
Component resolution: configuration key → component class → instance.

Identifiers stored in the configuration come in two forms:

  short driver name   ``itemknn``, ``text``, ``cos`` — looked up in the
                      driver table populated by ``@register_component``.
  dotted path         ``mypkg.recs.MyRecommender`` — imported with
                      ``importlib`` so user code can plug in without
                      registering.

Either way the resolved class must subclass the capability base for the
requested kind, otherwise it is treated as not found.

Usage::

    @register_component("recommender", "itemknn")
    class ItemKNNRecommender(Recommender):
        display_name = "ItemKNN"

    resolver = ComponentResolver(conf)
    cls = resolver.get_class("rec.recommender.class", "recommender", required=True)
    recommender = resolver.create(cls, conf)
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Optional, TypeVar

from recsys_runner.components.base import (
    DataModel,
    RecommendedFilter,
    Recommender,
    RecommenderEvaluator,
    RecommenderSimilarity,
)
from recsys_runner.errors import ComponentConstructionError, ComponentNotFound
from recsys_runner.job.configuration import Configuration

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)

COMPONENT_KINDS: dict[str, type] = {
    "data_model":  DataModel,
    "similarity":  RecommenderSimilarity,
    "recommender": Recommender,
    "evaluator":   RecommenderEvaluator,
    "filter":      RecommendedFilter,
}

# kind → driver name → class
_DRIVERS: dict[str, dict[str, type]] = {kind: {} for kind in COMPONENT_KINDS}
_BUILTINS_LOADED = False


def register_component(kind: str, name: str) -> Callable[[T], T]:
    """Class decorator: register a component under a short driver name.

    Raises:
        ValueError: If ``kind`` is unknown.
        TypeError:  If the class does not subclass the capability base.
    """
    if kind not in COMPONENT_KINDS:
        raise ValueError(f"Unknown component kind '{kind}'. Must be one of {sorted(COMPONENT_KINDS)}.")

    def decorator(cls: T) -> T:
        base = COMPONENT_KINDS[kind]
        if not issubclass(cls, base):
            raise TypeError(f"{cls.__name__} must subclass {base.__name__} to register as '{kind}'.")
        _DRIVERS[kind][name.lower()] = cls
        return cls

    return decorator


def unregister_component(kind: str, name: str) -> None:
    _DRIVERS.get(kind, {}).pop(name.lower(), None)


def list_components(kind: Optional[str] = None) -> dict[str, list[str]]:
    """Return registered driver names per kind (sorted)."""
    _ensure_builtins()
    kinds = [kind] if kind else list(COMPONENT_KINDS)
    return {k: sorted(_DRIVERS.get(k, {})) for k in kinds}


def driver_name(cls: type) -> str:
    """Short display name used in output paths (``ItemKNN``)."""
    return getattr(cls, "display_name", None) or cls.__name__


def _ensure_builtins() -> None:
    """Import the built-in components once so their decorators run."""
    global _BUILTINS_LOADED
    if not _BUILTINS_LOADED:
        _BUILTINS_LOADED = True
        importlib.import_module("recsys_runner.components.builtins")


def load_class(identifier: str, kind: str) -> type:
    """Resolve ``identifier`` to a class of the given kind.

    Raises:
        ComponentNotFound: Unknown driver name, failed import, missing
            attribute, or a class that is not the expected capability.
    """
    if kind not in COMPONENT_KINDS:
        raise ValueError(f"Unknown component kind '{kind}'.")
    _ensure_builtins()
    ident = identifier.strip()

    cls = _DRIVERS[kind].get(ident.lower())
    if cls is None:
        module_name, _, attr = ident.rpartition(".")
        if not module_name:
            raise ComponentNotFound(ident, kind, "no registered driver with that name")
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise ComponentNotFound(ident, kind, f"cannot import module '{module_name}'") from exc
        cls = getattr(module, attr, None)
        if cls is None:
            raise ComponentNotFound(ident, kind, f"module '{module_name}' has no attribute '{attr}'")

    base = COMPONENT_KINDS[kind]
    if not isinstance(cls, type) or not issubclass(cls, base):
        raise ComponentNotFound(ident, kind, f"not a {base.__name__}")
    return cls


class ComponentResolver:
    """Resolves component classes from a ``Configuration`` and builds them.

    Nothing is cached: every call re-reads the configuration, so a key
    changed between folds takes effect on the next fold.
    """

    def __init__(self, conf: Configuration) -> None:
        self.conf = conf

    def get_class(self, key: str, kind: str, required: bool = False) -> Optional[type]:
        """Return the class named under ``key``.

        Returns ``None`` when the key is absent or blank and ``required`` is
        False.

        Raises:
            ComponentNotFound: If the key is absent and ``required`` is True,
                or the identifier cannot be resolved.
        """
        identifier = self.conf.get_str(key)
        if identifier is None:
            if required:
                raise ComponentNotFound(f"<{key} not set>", kind)
            return None
        return load_class(identifier, kind)

    @staticmethod
    def create(cls: type, *args: Any) -> Any:
        """Instantiate ``cls`` with ``args``.

        Raises:
            ComponentConstructionError: If the constructor raises.
        """
        try:
            instance = cls(*args)
        except Exception as exc:
            raise ComponentConstructionError(
                f"Failed to construct {cls.__module__}.{cls.__qualname__}: {exc}"
            ) from exc
        logger.debug("Constructed %s", cls.__qualname__)
        return instance
