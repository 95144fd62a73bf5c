from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias, Union

from dirules.exceptions import DIRulesMissingArgumentError

if TYPE_CHECKING:
    from dirules._internal.container import Container

ReferenceName: TypeAlias = Union[str, type[Any], Sequence[Union[str, type[Any]]]]
"""A container identifier, or a path of identifiers through nested containers."""

ArgumentsSpec: TypeAlias = Union[Sequence[Any], Mapping[Union[int, str], Any]]
"""Positional arguments as a sequence, or a mapping of positions and names to values."""


@dataclass(slots=True)
class Reference:
    """Point at another entry in the container.

    A string or class name resolves with ``get_args(name, args)``. A list or
    tuple of names walks nested containers: each name is fetched with ``get``
    from the result of the previous one. An empty name resolves to ``None``.

    Examples:
        .. code-block:: python

            container.rule(Sql).set_constructor_args([Reference("replica_db")])
            container.rule(Model).set_constructor_args({"sql": Reference(Sql, ["orders"])})
            Reference(["config", "dsn"])

    """

    name: ReferenceName
    args: ArgumentsSpec = field(default_factory=tuple)

    def resolve(self, container: Container, instance: Any = None) -> Any:  # noqa: ARG002
        """Fetch the referenced entry.

        Args:
            container: Container to resolve against.
            instance: Object being configured, unused by this reference.

        """
        if not self.name:
            return None
        if isinstance(self.name, (str, type)):
            return container.get_args(self.name, self.args)

        result: Any = container
        for name in self.name:
            result = result.get(name)
        return result


@dataclass(slots=True)
class DefaultReference:
    """Autowire a parameter from its declared type.

    The argument planner creates these for typed parameters that have no
    configured value. At call time a positional argument only replaces a
    default reference when it is an instance of the referenced type.
    """

    type_name: str

    def resolve(self, container: Container, instance: Any = None) -> Any:  # noqa: ARG002
        """Fetch the entry for the referenced type.

        Args:
            container: Container to resolve against.
            instance: Object being configured, unused by this reference.

        """
        return container.get(self.type_name)


@dataclass(slots=True)
class Callback:
    """Compute an argument lazily from the container and the current instance.

    Examples:
        .. code-block:: python

            container.rule(Tuple).add_call("set_a", [Callback(lambda c, obj: obj.b * 2)])

    """

    callback: Callable[[Container, Any], Any]

    def resolve(self, container: Container, instance: Any = None) -> Any:
        """Invoke the wrapped callable.

        Args:
            container: Container passed as the first argument.
            instance: Object being configured, passed as the second argument.

        """
        return self.callback(container, instance)


@dataclass(slots=True)
class RequiredParameter:
    """Stand in for a required parameter nothing could supply."""

    parameter: str
    function: str = ""

    def resolve(self, container: Container, instance: Any = None) -> Any:  # noqa: ARG002
        """Fail with a missing argument error naming the parameter.

        Args:
            container: Container the argument was resolved against.
            instance: Object being configured, if any.

        Raises:
            DIRulesMissingArgumentError: Always.

        """
        raise DIRulesMissingArgumentError(self.parameter, self.function)


ResolvableValue: TypeAlias = Union[Reference, DefaultReference, Callback, RequiredParameter]
"""Every value the container resolves lazily instead of passing through."""

RESOLVABLE_TYPES: tuple[type[Any], ...] = (Reference, DefaultReference, Callback, RequiredParameter)


def is_resolvable(value: object) -> bool:
    """Return true when a value must be resolved before it is passed on.

    Args:
        value: Argument value to check.

    """
    return isinstance(value, RESOLVABLE_TYPES)


def resolve_value(value: Any, container: Container, instance: Any = None) -> Any:
    """Resolve a value if it is resolvable and return it unchanged otherwise.

    Args:
        value: Argument value, possibly resolvable.
        container: Container to resolve against.
        instance: Object being configured, if any.

    """
    if isinstance(value, RESOLVABLE_TYPES):
        return value.resolve(container, instance)
    return value
