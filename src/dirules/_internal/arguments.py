from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from dirules._internal.parameters import ParameterDescriptor
from dirules._internal.references import (
    ArgumentsSpec,
    DefaultReference,
    Reference,
    RequiredParameter,
    is_resolvable,
    resolve_value,
)
from dirules._internal.rules import Rule, RuleResolver
from dirules._internal.type_catalog import TypeCatalog, is_subclass
from dirules.exceptions import DIRulesError, DIRulesUnionTypeError

if TYPE_CHECKING:
    from dirules._internal.container import Container

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Arguments:
    """Positional and named arguments, normalized for lookup.

    Positional values are keyed by slot so a mapping such as
    ``{0: db, "name": "main"}`` mixes both kinds. Named keys are lower-cased
    because parameter names match case-insensitively.
    """

    positional: dict[int, Any] = field(default_factory=dict)
    named: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_spec(cls, spec: ArgumentsSpec | None) -> Arguments:
        """Normalize user-supplied arguments.

        Args:
            spec: A sequence of positional values, or a mapping of positions
                and names to values. ``None`` means no arguments.

        Raises:
            DIRulesError: If the value has any other shape.

        """
        arguments = cls()
        if spec is None:
            return arguments

        if isinstance(spec, Mapping):
            for key, value in spec.items():
                if isinstance(key, bool) or not isinstance(key, (int, str)):
                    msg = f"Argument keys must be positions or names, got {key!r}."
                    raise DIRulesError(msg)
                if isinstance(key, int):
                    arguments.positional[key] = value
                else:
                    arguments.named[key.lower()] = value
            return arguments

        if isinstance(spec, Sequence) and not isinstance(spec, (str, bytes)):
            arguments.positional = dict(enumerate(spec))
            return arguments

        msg = f"Arguments must be a sequence or a mapping, got {type(spec).__qualname__}."
        raise DIRulesError(msg)

    def resolved(self, container: Container, instance: Any = None) -> Arguments:
        """Return a copy with every resolvable value resolved.

        Args:
            container: Container to resolve against.
            instance: Object being configured, if any.

        """
        return Arguments(
            positional={
                position: resolve_value(value, container, instance)
                for position, value in self.positional.items()
            },
            named={
                name: resolve_value(value, container, instance)
                for name, value in self.named.items()
            },
        )


@dataclass(frozen=True, slots=True)
class PlannedArgument:
    """The default value chosen for one parameter."""

    descriptor: ParameterDescriptor
    value: Any


@dataclass(frozen=True, slots=True)
class ResolvedArguments:
    """Concrete values ready to be passed to a callable."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)

    def invoke(self, function: Callable[..., Any]) -> Any:
        """Call ``function`` with these arguments.

        Args:
            function: Callable to invoke.

        """
        return function(*self.args, **self.kwargs)


ArgumentPlan = tuple[PlannedArgument, ...]


class ArgumentPlanner:
    """Choose a default value for every parameter of a callable.

    Plans depend only on the callable and the rule arguments, so they are
    computed once and reused for every call of a compiled factory.
    """

    def __init__(
        self,
        *,
        catalog: TypeCatalog,
        rules: dict[str, Rule],
        instances: dict[str, Any],
        rule_resolver: RuleResolver,
        normalize_id: Callable[[Any], str],
    ) -> None:
        self._catalog = catalog
        self._rules = rules
        self._instances = instances
        self._rule_resolver = rule_resolver
        self._normalize_id = normalize_id

    def plan(
        self,
        descriptors: Sequence[ParameterDescriptor],
        rule_args: ArgumentsSpec | None,
    ) -> ArgumentPlan:
        """Build the default argument plan for a parameter list.

        For each parameter, in order: a named rule argument wins; then a
        positional rule argument whose type matches the declared class; then
        autowiring of the declared class; then any positional rule argument;
        then the declared default. Parameters left over become
        ``RequiredParameter`` placeholders that fail when resolved.

        Args:
            descriptors: Parameters of the callable, in declaration order.
            rule_args: Arguments configured on the rule.

        Raises:
            DIRulesUnionTypeError: If a required union-typed parameter has no
                configured value.

        """
        arguments = Arguments.from_spec(rule_args)
        planned: list[PlannedArgument] = []

        position = 0
        for descriptor in descriptors:
            name = descriptor.name.lower()
            declared_type = descriptor.declared_type
            has_positional = position in arguments.positional

            if name in arguments.named:
                value = arguments.named[name]
            elif (
                declared_type is not None
                and has_positional
                and self._is_compatible(arguments.positional[position], declared_type)
            ):
                value = arguments.positional[position]
                position += 1
            elif declared_type is not None and self._is_autowirable(declared_type):
                value = DefaultReference(self._catalog.register(declared_type))
                logger.debug(
                    "Autowiring parameter %r of %s with %s",
                    descriptor.name,
                    descriptor.function,
                    value.type_name,
                )
            elif has_positional:
                value = arguments.positional[position]
                position += 1
            elif descriptor.has_default:
                value = descriptor.default
            elif descriptor.is_union:
                names = " | ".join(member.__qualname__ for member in descriptor.types)
                msg = (
                    f"Parameter '{descriptor.name}' of {descriptor.function} is typed as "
                    f"'{names}' and has no default. Configure a value for it explicitly."
                )
                raise DIRulesUnionTypeError(msg)
            else:
                value = RequiredParameter(descriptor.name, descriptor.function)

            planned.append(PlannedArgument(descriptor=descriptor, value=value))

        return tuple(planned)

    def _is_autowirable(self, declared_type: type[Any]) -> bool:
        name = self._catalog.register(declared_type)
        if self._catalog.is_constructible(name):
            return True
        rule = self._rules.get(name)
        if rule is not None and not rule.is_empty():
            return True
        return name in self._instances

    def _is_compatible(self, value: Any, declared_type: type[Any]) -> bool:
        if is_resolvable(value):
            value_type = self._resolvable_type(value)
            return value_type is not None and is_subclass(value_type, declared_type)
        return is_subclass(type(value), declared_type)

    def _resolvable_type(self, value: Any) -> type[Any] | None:
        # Infer what a reference will produce without building anything.
        if isinstance(value, DefaultReference):
            return self._catalog.find(value.type_name)
        if not isinstance(value, Reference) or not isinstance(value.name, (str, type)):
            return None
        if not value.name:
            return None

        nid = self._normalize_id(value.name)
        seen: set[str] = set()
        while nid not in seen:
            seen.add(nid)
            instance = self._instances.get(nid)
            if instance is not None:
                return type(instance)

            rule = self._rules.get(nid)
            if rule is not None and rule.alias_of:
                nid = rule.alias_of
                continue

            effective_rule = self._rule_resolver.make_effective_rule(nid)
            if effective_rule.factory is not None:
                return None
            return self._catalog.find(effective_rule.class_name or nid)
        return None


class ArgumentResolver:
    """Combine a default argument plan with call-time arguments."""

    def __init__(self, *, container: Container, catalog: TypeCatalog) -> None:
        self._container = container
        self._catalog = catalog

    def resolve(
        self,
        plan: ArgumentPlan,
        call_args: Arguments,
        instance: Any = None,
    ) -> ResolvedArguments:
        """Produce the final arguments for one invocation.

        Call-time arguments are resolved first so their types are known. A
        named call argument always wins. A positional call argument replaces
        the planned value unless the plan autowires the parameter and the
        value is not an instance of the autowired type.

        Args:
            plan: Plan from ``ArgumentPlanner.plan``.
            call_args: Arguments supplied for this invocation only.
            instance: Object being configured, passed to resolvable values.

        Raises:
            DIRulesMissingArgumentError: If a required parameter received no value.

        """
        call_args = call_args.resolved(self._container, instance)
        resolved = ResolvedArguments()

        position = 0
        for planned in plan:
            name = planned.descriptor.name.lower()
            if name in call_args.named:
                value = call_args.named[name]
            elif position in call_args.positional and self._accepts_positional(
                planned.value,
                call_args.positional[position],
            ):
                value = call_args.positional[position]
                position += 1
            else:
                value = planned.value

            value = resolve_value(value, self._container, instance)
            if planned.descriptor.is_positional:
                resolved.args.append(value)
            else:
                resolved.kwargs[planned.descriptor.name] = value

        return resolved

    def _accepts_positional(self, planned_value: Any, value: Any) -> bool:
        if not isinstance(planned_value, DefaultReference):
            return True
        cls = self._catalog.find(planned_value.type_name)
        return cls is not None and is_subclass(type(value), cls)
