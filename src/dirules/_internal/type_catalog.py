from __future__ import annotations

import abc
import importlib
import inspect
import types
from abc import ABC, abstractmethod
from typing import Any, TypeGuard

from dirules._internal.defaults import NEVER_AUTOWIRED_TYPES

_IGNORED_BASE_MODULES = frozenset({"builtins", "abc", "typing", "typing_extensions"})
_CLASS_BOOKKEEPING_ATTRIBUTES = frozenset(
    {
        "__module__",
        "__qualname__",
        "__doc__",
        "__dict__",
        "__weakref__",
        "__annotations__",
        "__abstractmethods__",
        "__orig_bases__",
        "__parameters__",
        "__slots__",
        "__firstlineno__",
        "__static_attributes__",
        "__type_params__",
        "_abc_impl",
    },
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def type_name(cls: type[Any]) -> str:
    """Return the identifier a class is stored under.

    Args:
        cls: Class to name.

    """
    return f"{cls.__module__}.{cls.__qualname__}"


def is_interface_class(cls: type[Any]) -> bool:
    """Return true when a class only describes behavior for implementers.

    Protocols are interfaces. An ``abc.ABCMeta`` class is an interface when
    its own body declares nothing but abstract members and it either still
    has unimplemented abstract methods or only extends other interfaces.
    Abstract classes that carry concrete members are regular base classes.

    Args:
        cls: Class to classify.

    """
    if getattr(cls, "_is_protocol", False):
        return True
    if not isinstance(cls, abc.ABCMeta) or not _declares_only_abstract_members(cls):
        return False
    if inspect.isabstract(cls):
        return True
    return all(
        base.__module__ in _IGNORED_BASE_MODULES or is_interface_class(base)
        for base in cls.__bases__
    )


def _declares_only_abstract_members(cls: type[Any]) -> bool:
    return all(
        getattr(value, "__isabstractmethod__", False)
        for name, value in vars(cls).items()
        if name not in _CLASS_BOOKKEEPING_ATTRIBUTES
    )


class TypeCatalog(ABC):
    """Answer structural questions about types by identifier.

    The container never reflects on classes directly when it merges rules.
    It asks the catalog whether a name denotes a class, what that class
    inherits from, and which interfaces it implements.
    """

    @abstractmethod
    def register(self, cls: type[Any]) -> str:
        """Make a class known to the catalog and return its identifier.

        Args:
            cls: Class to register.

        """

    @abstractmethod
    def find(self, name: str) -> type[Any] | None:
        """Return the class for an identifier, or ``None`` when there is none.

        Args:
            name: Normalized identifier.

        """

    def exists(self, name: str) -> bool:
        """Return true when the identifier denotes a class.

        Args:
            name: Normalized identifier.

        """
        return self.find(name) is not None

    def is_interface(self, name: str) -> bool:
        """Return true when the identifier denotes an interface.

        Args:
            name: Normalized identifier.

        """
        cls = self.find(name)
        return cls is not None and is_interface_class(cls)

    @abstractmethod
    def is_constructible(self, name: str) -> bool:
        """Return true when the container may build the class on its own.

        Args:
            name: Normalized identifier.

        """

    @abstractmethod
    def parents(self, name: str) -> list[str]:
        """Return the supertype chain, nearest first, without interfaces.

        Args:
            name: Normalized identifier.

        """

    @abstractmethod
    def interfaces(self, name: str) -> list[str]:
        """Return the interfaces the class implements.

        Args:
            name: Normalized identifier.

        """


class RuntimeTypeCatalog(TypeCatalog):
    """Catalog backed by live classes and ``importlib`` lookups.

    Classes seen by the container are remembered by identifier. Unknown
    dotted names are imported on demand, which lets configuration refer to
    classes by string before they have been touched.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[Any]] = {}
        self._misses: set[str] = set()

    def register(self, cls: type[Any]) -> str:
        """Make a class known to the catalog and return its identifier.

        Args:
            cls: Class to register.

        """
        name = type_name(cls)
        self._classes.setdefault(name, cls)
        self._misses.discard(name)
        return name

    def find(self, name: str) -> type[Any] | None:
        """Return the class for an identifier, or ``None`` when there is none.

        Args:
            name: Normalized identifier.

        """
        cls = self._classes.get(name)
        if cls is not None:
            return cls
        if name in self._misses:
            return None

        cls = self._import(name)
        if cls is None:
            self._misses.add(name)
            return None
        self._classes[name] = cls
        return cls

    def is_constructible(self, name: str) -> bool:
        """Return true when the container may build the class on its own.

        Args:
            name: Normalized identifier.

        """
        cls = self.find(name)
        if cls is None or cls.__module__ == "builtins":
            return False
        if is_interface_class(cls) or inspect.isabstract(cls):
            return False
        if issubclass(cls, type):
            return False
        return not issubclass(cls, NEVER_AUTOWIRED_TYPES)

    def parents(self, name: str) -> list[str]:
        """Return the supertype chain, nearest first, without interfaces.

        Args:
            name: Normalized identifier.

        """
        cls = self.find(name)
        if cls is None:
            return []
        return [
            self.register(base)
            for base in cls.__mro__[1:]
            if base.__module__ not in _IGNORED_BASE_MODULES and not is_interface_class(base)
        ]

    def interfaces(self, name: str) -> list[str]:
        """Return the interfaces the class implements.

        Args:
            name: Normalized identifier.

        """
        cls = self.find(name)
        if cls is None:
            return []
        return [
            self.register(base)
            for base in cls.__mro__[1:]
            if base.__module__ not in _IGNORED_BASE_MODULES and is_interface_class(base)
        ]

    def _import(self, name: str) -> type[Any] | None:
        # Try the longest importable module prefix, then walk the qualname.
        parts = name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target: Any = importlib.import_module(module_name)
            except (ImportError, ValueError):
                continue
            for attribute in parts[split:]:
                target = getattr(target, attribute, None)
                if target is None:
                    return None
            return target if is_runtime_class(target) else None
        return None


def is_subclass(candidate: type[Any], cls: type[Any]) -> bool:
    """Return true when ``candidate`` is ``cls`` or derives from it.

    Protocols that are not runtime checkable refuse ``issubclass``; for those
    only explicit inheritance counts.

    Args:
        candidate: Class being checked.
        cls: Expected base class.

    """
    try:
        return issubclass(candidate, cls)
    except TypeError:
        return cls in getattr(candidate, "__mro__", ())
