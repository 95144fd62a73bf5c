from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from dirules._internal.type_catalog import is_runtime_class
from dirules.exceptions import DIRulesInvalidCallbackError, DIRulesNotFoundError

logger = logging.getLogger(__name__)

_MISSING_ANNOTATION: Any = object()
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_UNPLANNED_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one parameter of a callable the container will invoke."""

    name: str
    """Parameter name as declared."""
    position: int
    """Ordinal position among the planned parameters."""
    kind: inspect._ParameterKind
    """How the parameter is passed: positionally or by keyword."""
    types: tuple[type[Any], ...] = ()
    """Declared classes. Empty when untyped, more than one for a union."""
    has_default: bool = False
    """True when the parameter declares a default value."""
    default: Any = None
    """The declared default, meaningful only when ``has_default`` is set."""
    function: str = ""
    """Qualified name of the owning callable, used in error messages."""

    @property
    def is_union(self) -> bool:
        return len(self.types) > 1

    @property
    def declared_type(self) -> type[Any] | None:
        """The single declared class, or ``None`` for untyped and union parameters."""
        return self.types[0] if len(self.types) == 1 else None

    @property
    def is_positional(self) -> bool:
        return self.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(slots=True)
class ParameterInspector:
    """Turn callables into parameter descriptor lists."""

    def inspect_callable(self, function: Callable[..., Any]) -> list[ParameterDescriptor]:
        """Describe the parameters of a class constructor or any other callable.

        Args:
            function: Class or callable to inspect.

        Raises:
            DIRulesInvalidCallbackError: If the callable has no inspectable signature.
            DIRulesNotFoundError: If a required parameter is annotated with a
                class that cannot be found.

        """
        return self._describe(
            function=function,
            function_name=self.function_name(function),
            skip_first_parameter=False,
        )

    def inspect_method(self, cls: type[Any], method_name: str) -> list[ParameterDescriptor]:
        """Describe a method as it will be called on an instance of ``cls``.

        Args:
            cls: Class declaring or inheriting the method.
            method_name: Name of the method.

        Raises:
            DIRulesInvalidCallbackError: If the method does not exist.

        """
        try:
            static_member = inspect.getattr_static(cls, method_name)
        except AttributeError as error:
            msg = f"Method '{method_name}' does not exist on '{cls.__qualname__}'."
            raise DIRulesInvalidCallbackError(msg) from error

        member = getattr(cls, method_name)
        skip_first_parameter = inspect.isfunction(static_member)
        return self._describe(
            function=member,
            function_name=f"{cls.__qualname__}.{method_name}()",
            skip_first_parameter=skip_first_parameter,
        )

    def function_name(self, function: Callable[..., Any]) -> str:
        """Return a readable qualified name for error messages.

        Args:
            function: Class or callable to name.

        """
        if inspect.isclass(function):
            return f"{function.__qualname__}.__init__()"
        qualname = getattr(function, "__qualname__", None)
        if qualname is None:
            return repr(function)
        return f"{qualname}()"

    def _describe(
        self,
        *,
        function: Callable[..., Any],
        function_name: str,
        skip_first_parameter: bool,
    ) -> list[ParameterDescriptor]:
        parameters = self._parameters(function, skip_first_parameter=skip_first_parameter)
        annotations, annotation_error = self._resolved_type_hints(function)
        descriptors: list[ParameterDescriptor] = []

        for parameter in parameters:
            if parameter.kind in _UNPLANNED_KINDS:
                continue

            has_default = parameter.default is not Parameter.empty
            annotation = self._parameter_annotation(
                parameter=parameter,
                annotations=annotations,
            )
            if annotation is _MISSING_ANNOTATION:
                if not has_default:
                    msg = (
                        f"Could not find class for required parameter '{parameter.name}' "
                        f"for {function_name} in the container."
                    )
                    if annotation_error is None:
                        raise DIRulesNotFoundError(msg)
                    raise DIRulesNotFoundError(msg) from annotation_error
                logger.debug(
                    "Ignoring unresolvable annotation of optional parameter %r in %s",
                    parameter.name,
                    function_name,
                )

            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    position=len(descriptors),
                    kind=parameter.kind,
                    types=self.declared_types(annotation),
                    has_default=has_default,
                    default=parameter.default if has_default else None,
                    function=function_name,
                ),
            )

        return descriptors

    def declared_types(self, annotation: Any) -> tuple[type[Any], ...]:
        """Reduce an annotation to the classes the parameter accepts.

        ``Annotated`` metadata is dropped, ``None`` members of a union are
        ignored, and generic aliases collapse to their origin class. Anything
        that does not name classes yields an empty tuple.

        Args:
            annotation: Evaluated annotation, or the missing-annotation sentinel.

        """
        if any(annotation is skipped for skipped in (_MISSING_ANNOTATION, Parameter.empty, Any)):
            return ()

        origin = get_origin(annotation)
        if origin is Annotated:
            return self.declared_types(get_args(annotation)[0])

        if origin is Union or origin is types.UnionType:
            members = [member for member in get_args(annotation) if member is not type(None)]
            collected: list[type[Any]] = []
            for member in members:
                member_types = self.declared_types(member)
                if not member_types:
                    return ()
                collected.extend(member_types)
            return tuple(dict.fromkeys(collected))

        if is_runtime_class(annotation):
            return () if annotation is type(None) else (annotation,)

        if is_runtime_class(origin):
            return (origin,)

        return ()

    def _parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        # String annotations are only evaluated through the resolved type hints.
        raw_annotation = parameter.annotation
        if isinstance(raw_annotation, str):
            return _MISSING_ANNOTATION
        return raw_annotation

    def _parameters(
        self,
        function: Callable[..., Any],
        *,
        skip_first_parameter: bool,
    ) -> tuple[Parameter, ...]:
        try:
            parameters = tuple(inspect.signature(function).parameters.values())
        except (TypeError, ValueError) as error:
            msg = f"Could not inspect the signature of {function!r}."
            raise DIRulesInvalidCallbackError(msg) from error

        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            return parameters[1:]
        return parameters

    def _resolved_type_hints(
        self,
        function: Callable[..., Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        annotations: dict[str, Any] = {}
        annotation_error: Exception | None = None

        target = function
        if inspect.ismethod(function):
            target = function.__func__

        if inspect.isclass(target):
            return self._merge_class_callable_hints(target)

        try:
            annotations = get_type_hints(target, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            annotation_error = error

        return annotations, annotation_error

    def _merge_class_callable_hints(
        self,
        cls: type[Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        merged_annotations: dict[str, Any] = {}
        merged_error: Exception | None = None

        for callable_member_name in ("__init__", "__new__"):
            callable_member = getattr(cls, callable_member_name)
            try:
                member_annotations = get_type_hints(callable_member, include_extras=True)
            except (AttributeError, NameError, TypeError) as error:
                if merged_error is None:
                    merged_error = error
                continue
            for parameter_name, parameter_annotation in member_annotations.items():
                merged_annotations.setdefault(parameter_name, parameter_annotation)

        return merged_annotations, merged_error
