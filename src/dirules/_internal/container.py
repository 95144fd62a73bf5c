from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, overload

from dirules._internal.arguments import ArgumentPlanner, ArgumentResolver, Arguments
from dirules._internal.builder import CompiledFactory, InstanceBuilder
from dirules._internal.defaults import WILDCARD_RULE_ID
from dirules._internal.parameters import ParameterInspector
from dirules._internal.references import ArgumentsSpec
from dirules._internal.rules import (
    Rule,
    RuleCall,
    RuleResolver,
    copy_rules,
    make_wildcard_rule,
)
from dirules._internal.type_catalog import RuntimeTypeCatalog, TypeCatalog
from dirules.container_interface import ContainerConfiguration
from dirules.exceptions import DIRulesError, DIRulesInvalidCallbackError

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Container(ContainerConfiguration):
    """Build objects from rules, autowiring everything the rules leave open.

    Identifiers are strings or classes. A class is stored under its dotted
    ``module.QualName`` path, so ``container.get(Db)`` and
    ``container.get("app.db.Db")`` address the same entry.

    Configuration is fluent: ``rule(id)`` selects a rule and the setters
    that follow modify it. The wildcard rule (``default_rule()``) is
    selected initially and applies to every identifier unless its
    inheritance is turned off.

    Resolution is recursive. Constructor and method parameters are filled
    from named rule arguments, positional rule arguments, the container
    itself for class-typed parameters, and finally declared defaults.
    Non-shared entries get a compiled factory cached per identifier; shared
    entries are built once and may depend on each other cyclically.

    Examples:
        .. code-block:: python

            container = Container()
            container.rule(Db).set_shared(True).set_constructor_args({"dsn": "sqlite://"})
            container.rule(Repository).add_call("set_clock", [Reference(SystemClock)])

            repository = container.get(Repository)

    """

    def __init__(self, *, type_catalog: TypeCatalog | None = None) -> None:
        """Initialize an empty container with only the wildcard rule.

        Args:
            type_catalog: Catalog used to look classes up by identifier and to
                walk their hierarchy. Defaults to ``RuntimeTypeCatalog``.

        """
        self._catalog = type_catalog if type_catalog is not None else RuntimeTypeCatalog()
        self._rules: dict[str, Rule] = {WILDCARD_RULE_ID: make_wildcard_rule()}
        self._current_rule_id = WILDCARD_RULE_ID
        self._instances: dict[str, Any] = {}
        self._factories: dict[str, CompiledFactory] = {}
        self._wire()

    def _wire(self) -> None:
        self._inspector = ParameterInspector()
        self._rule_resolver = RuleResolver(self._rules, self._catalog)
        self._planner = ArgumentPlanner(
            catalog=self._catalog,
            rules=self._rules,
            instances=self._instances,
            rule_resolver=self._rule_resolver,
            normalize_id=self._normalize_id,
        )
        self._resolver = ArgumentResolver(container=self, catalog=self._catalog)
        self._builder = InstanceBuilder(
            catalog=self._catalog,
            instances=self._instances,
            factories=self._factories,
            rule_resolver=self._rule_resolver,
            inspector=self._inspector,
            planner=self._planner,
            resolver=self._resolver,
        )

    # region Resolution
    @overload
    def get(self, id: type[T]) -> T: ...

    @overload
    def get(self, id: str) -> Any: ...

    def get(self, id: Any) -> Any:
        """Return the entry for an identifier.

        Args:
            id: Class or string identifier.

        Raises:
            DIRulesNotFoundError: If nothing can be built for the identifier.
            DIRulesError: If the entry or one of its dependencies cannot be built.

        Examples:
            .. code-block:: python

                db = container.get(Db)
                same_db = container.get("myapp.db.Db")

        """
        return self.get_args(id)

    @overload
    def get_args(self, id: type[T], args: ArgumentsSpec | None = None) -> T: ...

    @overload
    def get_args(self, id: str, args: ArgumentsSpec | None = None) -> Any: ...

    def get_args(self, id: Any, args: ArgumentsSpec | None = None) -> Any:
        """Return the entry for an identifier, passing extra constructor arguments.

        Shared entries that already exist are returned as they are and the
        arguments are ignored.

        Args:
            id: Class or string identifier.
            args: Positional values as a sequence, or a mapping of positions
                and parameter names to values. Named values always override
                autowiring.

        Raises:
            DIRulesNotFoundError: If nothing can be built for the identifier.
            DIRulesError: If the entry or one of its dependencies cannot be built.

        Examples:
            .. code-block:: python

                db = container.get_args(Db, ["replica"])
                sql = container.get_args(Sql, {"db": db})

        """
        nid = self._normalize_id(id)

        if nid in self._instances:
            return self._instances[nid]

        arguments = Arguments.from_spec(args)
        factory = self._factories.get(nid)
        if factory is not None:
            return factory(arguments)

        rule = self._rules.get(nid)
        if rule is not None and rule.alias_of:
            return self.get_args(rule.alias_of, args)

        return self._builder.create_instance(nid, arguments)

    def call(self, callback: Any, args: ArgumentsSpec | None = None) -> Any:
        """Invoke a callable, autowiring its parameters like a constructor.

        Args:
            callback: A function, bound method, any other callable, or an
                ``(object_or_class, "method_name")`` pair.
            args: Arguments for the call, with the same shape as rule
                constructor arguments.

        Raises:
            DIRulesInvalidCallbackError: If the callback cannot be understood.
            DIRulesMissingArgumentError: If a required parameter has no value.

        Examples:
            .. code-block:: python

                container.call(sql.set_db)
                container.call((sql, "set_db"))

        """
        function, instance = self._callable_target(callback)
        plan = self._planner.plan(self._inspector.inspect_callable(function), args)
        resolved = self._resolver.resolve(plan, Arguments(), instance)
        return resolved.invoke(function)

    def has(self, id: Any) -> bool:
        """Return true if the container can return an entry for the identifier.

        Args:
            id: Class or string identifier.

        """
        nid = self._normalize_id(id)
        return nid in self._instances or self.has_rule(nid) or self._catalog.exists(nid)

    # endregion Resolution

    # region Rule configuration
    def default_rule(self) -> Self:
        """Select the wildcard rule."""
        self._current_rule_id = WILDCARD_RULE_ID
        return self

    def rule(self, id: Any) -> Self:
        """Select the rule for an identifier, creating it when missing.

        Args:
            id: Class or string identifier.

        """
        nid = self._normalize_id(id)
        self._rules.setdefault(nid, Rule())
        self._current_rule_id = nid
        return self

    def has_rule(self, id: Any) -> bool:
        """Return true if a non-empty rule is defined for the identifier.

        Args:
            id: Class or string identifier.

        """
        rule = self._rules.get(self._normalize_id(id))
        return rule is not None and not rule.is_empty()

    def get_class(self) -> str:
        """Return the class identifier of the current rule, or an empty string."""
        return self._current_rule.class_name or ""

    def set_class(self, class_name: Any) -> Self:
        """Set the class built for the current rule.

        Args:
            class_name: Class or string identifier of a class.

        """
        self._mutate_current_rule().class_name = self._normalize_id(class_name)
        return self

    def get_alias_of(self) -> str:
        """Return the identifier the current rule redirects to, or an empty string."""
        return self._current_rule.alias_of or ""

    def set_alias_of(self, alias: Any) -> Self:
        """Make the current rule redirect to another identifier.

        Args:
            alias: Identifier to redirect to. Pointing a rule at itself is
                logged and ignored.

        """
        nid = self._normalize_id(alias)
        if nid == self._current_rule_id:
            logger.warning("Rule %s cannot be an alias of itself.", nid)
            return self

        self._mutate_current_rule().alias_of = nid
        return self

    def add_alias(self, *aliases: Any) -> Self:
        """Add identifiers that redirect to the current rule.

        Getting an alias behaves like getting the current rule's identifier,
        including returning the same shared instance.

        Args:
            aliases: Identifiers to add. An alias equal to the current rule is
                logged and skipped.

        """
        for alias in aliases:
            nid = self._normalize_id(alias)
            if nid == self._current_rule_id:
                logger.warning("Tried to set alias '%s' to self.", nid)
                continue
            self._rules.setdefault(nid, Rule()).alias_of = self._current_rule_id
        self._factories.clear()
        return self

    def remove_alias(self, alias: Any) -> Self:
        """Remove an alias of the current rule.

        Args:
            alias: Identifier to remove. An alias that points at a different
                rule is logged but still removed.

        """
        nid = self._normalize_id(alias)
        rule = self._rules.get(nid)
        if rule is None:
            return self

        if rule.alias_of and rule.alias_of != self._current_rule_id:
            logger.warning(
                "Alias '%s' points to '%s', not '%s'; removing it anyway.",
                nid,
                rule.alias_of,
                self._current_rule_id,
            )
        rule.alias_of = None
        if rule.is_empty():
            del self._rules[nid]
        self._factories.clear()
        return self

    def get_aliases(self) -> list[str]:
        """Return every identifier that redirects to the current rule."""
        return [nid for nid, rule in self._rules.items() if rule.alias_of == self._current_rule_id]

    def get_factory(self) -> Callable[..., Any] | None:
        """Return the factory of the current rule, if any."""
        return self._current_rule.factory

    def set_factory(self, factory: Callable[..., Any] | None = None) -> Self:
        """Set the callable that builds entries for the current rule.

        The factory's parameters are autowired and filled from the rule's
        constructor arguments exactly like a constructor's.

        Args:
            factory: Callable returning the entry, or ``None`` to remove it.

        """
        self._mutate_current_rule().factory = factory
        return self

    def is_shared(self) -> bool:
        """Return whether the current rule is shared."""
        return bool(self._current_rule.shared)

    def set_shared(self, shared: bool) -> Self:  # noqa: FBT001
        """Set whether the current rule builds a single shared instance.

        Args:
            shared: Pass ``True`` to build once and reuse the instance.

        """
        self._mutate_current_rule().shared = shared
        return self

    def get_inherit(self) -> bool:
        """Return whether the current rule extends to subclasses."""
        inherit = self._current_rule.inherit
        return True if inherit is None else inherit

    def set_inherit(self, inherit: bool) -> Self:  # noqa: FBT001
        """Set whether subclasses and implementers pick up the current rule.

        Args:
            inherit: Pass ``False`` to keep the rule to its own identifier.

        """
        self._mutate_current_rule().inherit = inherit
        return self

    def get_constructor_args(self) -> ArgumentsSpec:
        """Return the constructor arguments of the current rule."""
        constructor_args = self._current_rule.constructor_args
        return [] if constructor_args is None else constructor_args

    def set_constructor_args(self, args: ArgumentsSpec) -> Self:
        """Set the constructor or factory arguments of the current rule.

        Args:
            args: Positional values as a sequence, or a mapping of positions
                and parameter names to values.

        """
        Arguments.from_spec(args)
        self._mutate_current_rule().constructor_args = args
        return self

    def add_call(self, method: str, args: ArgumentsSpec = ()) -> Self:
        """Add a method call made on every instance built from the current rule.

        Args:
            method: Name of the method to call.
            args: Arguments for the method, autowired like constructor arguments.

        """
        Arguments.from_spec(args)
        rule = self._mutate_current_rule()
        rule.calls = [*(rule.calls or []), RuleCall(method=method, args=args)]
        return self

    # endregion Rule configuration

    # region Instances
    def set_instance(self, id: Any, instance: Any) -> Self:
        """Store an instance that is returned for the identifier from now on.

        The instance is returned even when the identifier's rule is not
        shared.

        Args:
            id: Class or string identifier.
            instance: Instance to return, or ``None`` to drop the stored one.

        """
        nid = self._normalize_id(id)
        if instance is None:
            self._instances.pop(nid, None)
        else:
            self._instances[nid] = instance
        # Argument plans autowire interfaces only while an instance is stored.
        self._factories.clear()
        return self

    def has_instance(self, id: Any) -> bool:
        """Return true if an instance is stored for the identifier.

        Args:
            id: Class or string identifier.

        """
        return self._normalize_id(id) in self._instances

    def clear_instances(self) -> Self:
        """Drop every stored and shared instance, keeping the rules."""
        self._instances.clear()
        self._factories.clear()
        return self

    # endregion Instances

    def clone(self) -> Self:
        """Return a container with its own copy of this container's rules.

        Rule arguments that are plain objects, such as a connection, are
        passed to the clone as the same object. Stored instances are shared
        with the clone, compiled factories are not, and the clone keeps the
        same rule selected.
        """
        return copy.copy(self)

    def __copy__(self) -> Self:
        clone = type(self).__new__(type(self))
        clone._catalog = self._catalog
        clone._rules = copy_rules(self._rules, {id(self): clone})
        clone._current_rule_id = self._current_rule_id
        clone._instances = dict(self._instances)
        clone._factories = {}
        clone._wire()
        return clone

    @property
    def _current_rule(self) -> Rule:
        return self._rules.setdefault(self._current_rule_id, Rule())

    def _mutate_current_rule(self) -> Rule:
        # Compiled factories capture effective rules, so any change invalidates them.
        self._factories.clear()
        return self._current_rule

    def _normalize_id(self, id: Any) -> str:
        if isinstance(id, type):
            return self._catalog.register(id)
        if isinstance(id, str):
            return id.removeprefix(".")
        msg = f"Container identifiers must be strings or classes, got {id!r}."
        raise DIRulesError(msg)

    def _callable_target(self, callback: Any) -> tuple[Callable[..., Any], Any]:
        if isinstance(callback, tuple) and len(callback) == 2:  # noqa: PLR2004
            target, method_name = callback
            if not isinstance(method_name, str) or not hasattr(target, method_name):
                msg = f"Could not understand callback {callback!r}."
                raise DIRulesInvalidCallbackError(msg)
            instance = None if inspect.isclass(target) else target
            return getattr(target, method_name), instance

        if inspect.ismethod(callback):
            instance = None if inspect.isclass(callback.__self__) else callback.__self__
            return callback, instance

        if callable(callback) and not isinstance(callback, str):
            return callback, None

        msg = f"Could not understand callback {callback!r}."
        raise DIRulesInvalidCallbackError(msg)
