from __future__ import annotations

from collections.abc import Sequence


class DIRulesError(Exception):
    """Represent a base class for all container failures.

    Catch this type when you want to handle any configuration or resolution
    error without matching each concrete exception class individually.
    """


class DIRulesNotFoundError(DIRulesError):
    """Signal that an identifier cannot be turned into an entry.

    Raised by ``get``/``get_args`` when the identifier has no instance, no
    factory, and names no discoverable class, and while planning arguments
    when a required parameter is annotated with a class that cannot be found.

    Typical fixes include configuring a rule with ``set_class`` or
    ``set_factory`` for the identifier, or importing the annotated class.
    """


class DIRulesMissingArgumentError(DIRulesError):
    """Signal that a required parameter could not be supplied.

    The error is raised when a required parameter has no rule argument, no
    call-time argument, no default, and its type cannot be autowired.

    Typical fixes include passing the value through ``set_constructor_args``
    or ``get_args``, or configuring a rule for the parameter's type.
    """

    def __init__(self, parameter: str, function: str = "") -> None:
        self.parameter = parameter
        self.function = function

        if function:
            msg = f"Missing argument '{parameter}' for {function}."
        else:
            msg = f"Missing argument '{parameter}'."
        super().__init__(msg)


class DIRulesUnionTypeError(DIRulesError):
    """Signal a required union-typed parameter with no configured value.

    No single class can be chosen for autowiring, so planning fails before
    any instance is built.

    Typical fixes include giving the parameter a default or configuring a
    value for it with ``set_constructor_args``.
    """


class DIRulesCircularDependencyError(DIRulesError):
    """Signal a dependency cycle made only of non-shared entries.

    Cycles are allowed when one of the entries in the loop is shared,
    because the shared placeholder breaks the recursion.

    Typical fix is marking one of the entries in the chain shared with
    ``set_shared(True)``.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        msg = f"Circular dependency detected: {' -> '.join(self.chain)}"
        super().__init__(msg)


class DIRulesInvalidCallbackError(DIRulesError):
    """Signal a callable the container cannot inspect or invoke.

    Raised by ``call`` for targets that are neither callables nor
    ``(object, method_name)`` pairs, and when a rule's post-construction call
    names a method that does not exist.
    """
