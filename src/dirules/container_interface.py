from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing_extensions import Self

    from dirules._internal.references import ArgumentsSpec


class ContainerConfiguration(ABC):
    """Interface for objects that resolve entries from configurable rules."""

    @abstractmethod
    def get(self, id: Any) -> Any:
        """Return the entry for an identifier.

        Args:
            id: Class or string identifier.

        """

    @abstractmethod
    def get_args(self, id: Any, args: ArgumentsSpec | None = None) -> Any:
        """Return the entry for an identifier, passing extra constructor arguments.

        Args:
            id: Class or string identifier.
            args: Positional values as a sequence, or a mapping of positions
                and parameter names to values.

        """

    @abstractmethod
    def has(self, id: Any) -> bool:
        """Return true if the container can return an entry for the identifier.

        Args:
            id: Class or string identifier.

        """

    @abstractmethod
    def call(self, callback: Any, args: ArgumentsSpec | None = None) -> Any:
        """Invoke a callable, autowiring its parameters.

        Args:
            callback: A callable or an ``(object_or_class, "method_name")`` pair.
            args: Arguments for the call.

        """

    @abstractmethod
    def rule(self, id: Any) -> Self:
        """Select the rule for an identifier.

        Args:
            id: Class or string identifier.

        """

    @abstractmethod
    def default_rule(self) -> Self:
        """Select the wildcard rule."""

    @abstractmethod
    def has_rule(self, id: Any) -> bool:
        """Return true if a rule is defined for the identifier.

        Args:
            id: Class or string identifier.

        """

    @abstractmethod
    def set_class(self, class_name: Any) -> Self:
        """Set the class built for the current rule.

        Args:
            class_name: Class or string identifier of a class.

        """

    @abstractmethod
    def set_alias_of(self, alias: Any) -> Self:
        """Make the current rule redirect to another identifier.

        Args:
            alias: Identifier to redirect to.

        """

    @abstractmethod
    def add_alias(self, *aliases: Any) -> Self:
        """Add identifiers that redirect to the current rule.

        Args:
            aliases: Identifiers to add.

        """

    @abstractmethod
    def remove_alias(self, alias: Any) -> Self:
        """Remove an alias of the current rule.

        Args:
            alias: Identifier to remove.

        """

    @abstractmethod
    def set_factory(self, factory: Callable[..., Any] | None = None) -> Self:
        """Set the callable that builds entries for the current rule.

        Args:
            factory: Callable returning the entry, or ``None`` to remove it.

        """

    @abstractmethod
    def set_shared(self, shared: bool) -> Self:  # noqa: FBT001
        """Set whether the current rule builds a single shared instance.

        Args:
            shared: Pass ``True`` to build once and reuse the instance.

        """

    @abstractmethod
    def set_inherit(self, inherit: bool) -> Self:  # noqa: FBT001
        """Set whether subclasses and implementers pick up the current rule.

        Args:
            inherit: Pass ``False`` to keep the rule to its own identifier.

        """

    @abstractmethod
    def set_constructor_args(self, args: ArgumentsSpec) -> Self:
        """Set the constructor or factory arguments of the current rule.

        Args:
            args: Positional values as a sequence, or a mapping of positions
                and parameter names to values.

        """

    @abstractmethod
    def add_call(self, method: str, args: ArgumentsSpec = ()) -> Self:
        """Add a method call made on every instance built from the current rule.

        Args:
            method: Name of the method to call.
            args: Arguments for the method.

        """

    @abstractmethod
    def set_instance(self, id: Any, instance: Any) -> Self:
        """Store an instance that is returned for the identifier.

        Args:
            id: Class or string identifier.
            instance: Instance to return, or ``None`` to drop the stored one.

        """

    @abstractmethod
    def has_instance(self, id: Any) -> bool:
        """Return true if an instance is stored for the identifier.

        Args:
            id: Class or string identifier.

        """
