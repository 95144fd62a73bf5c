from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any, TypeAlias

from dirules._internal.arguments import (
    ArgumentPlan,
    ArgumentPlanner,
    ArgumentResolver,
    Arguments,
)
from dirules._internal.parameters import ParameterInspector
from dirules._internal.rules import Rule, RuleCall, RuleResolver
from dirules._internal.type_catalog import TypeCatalog, is_interface_class
from dirules.exceptions import DIRulesCircularDependencyError, DIRulesNotFoundError

logger = logging.getLogger(__name__)

CompiledFactory: TypeAlias = Callable[[Arguments], Any]
"""Builds a new instance of one identifier from call-time arguments."""

CallPlans: TypeAlias = list[tuple[str, ArgumentPlan]]


class InstanceBuilder:
    """Construct entries from their effective rules.

    Non-shared entries are built by a compiled factory that the container
    caches, so the rule merge and argument planning happen once per
    identifier. Shared entries are built once; a placeholder is published in
    the instance cache before any dependency is resolved, which lets cyclic
    graphs of shared entries terminate.
    """

    def __init__(
        self,
        *,
        catalog: TypeCatalog,
        instances: dict[str, Any],
        factories: dict[str, CompiledFactory],
        rule_resolver: RuleResolver,
        inspector: ParameterInspector,
        planner: ArgumentPlanner,
        resolver: ArgumentResolver,
    ) -> None:
        self._catalog = catalog
        self._instances = instances
        self._factories = factories
        self._rule_resolver = rule_resolver
        self._inspector = inspector
        self._planner = planner
        self._resolver = resolver
        self._in_flight: list[tuple[str, bool]] = []

    def create_instance(self, nid: str, arguments: Arguments) -> Any:
        """Build an entry that has no cached instance or factory yet.

        Args:
            nid: Normalized identifier.
            arguments: Call-time arguments.

        Raises:
            DIRulesNotFoundError: If the class to build does not exist.
            DIRulesCircularDependencyError: If non-shared entries depend on
                each other in a loop.

        """
        rule = self._rule_resolver.make_effective_rule(nid)

        if rule.shared:
            return self._create_shared_instance(nid, rule, arguments)

        factory = self._make_factory(nid, rule)
        instance = factory(arguments)
        self._factories[nid] = factory
        return instance

    def _make_factory(self, nid: str, rule: Rule) -> CompiledFactory:
        calls = rule.calls or []

        if rule.factory is not None:
            function = rule.factory
            plan = self._planner.plan(
                self._inspector.inspect_callable(function),
                rule.constructor_args,
            )

            def build_from_factory(arguments: Arguments) -> Any:
                with self._tracking(nid, shared=False):
                    instance = self._resolver.resolve(plan, arguments).invoke(function)
                    if calls and instance is not None:
                        self._run_calls(instance, self._plan_calls(type(instance), calls))
                    return instance

            logger.debug("Compiled factory for %s from %r", nid, function)
            return build_from_factory

        cls = self._find_class(nid, rule)
        plan = self._planner.plan(self._inspector.inspect_callable(cls), rule.constructor_args)
        call_plans = self._plan_calls(cls, calls)

        def build_from_class(arguments: Arguments) -> Any:
            with self._tracking(nid, shared=False):
                instance = self._resolver.resolve(plan, arguments).invoke(cls)
                self._run_calls(instance, call_plans)
                return instance

        logger.debug("Compiled factory for %s from class %s", nid, cls.__qualname__)
        return build_from_class

    def _create_shared_instance(self, nid: str, rule: Rule, arguments: Arguments) -> Any:
        with self._tracking(nid, shared=True):
            try:
                if rule.factory is not None:
                    instance = self._call_shared_factory(nid, rule.factory, rule, arguments)
                    cls: type[Any] | None = type(instance) if instance is not None else None
                else:
                    cls = self._find_class(nid, rule)
                    instance = self._construct_shared(nid, cls, rule, arguments)

                if rule.calls and cls is not None:
                    self._run_calls(instance, self._plan_calls(cls, rule.calls))
            except BaseException:
                # Only this slot is removed. Shared entries finished during the
                # attempt stay cached and keep their reference to this shell.
                self._instances.pop(nid, None)
                logger.debug("Removed placeholder for %s after a failed construction", nid)
                raise

        return instance

    def _call_shared_factory(
        self,
        nid: str,
        function: Callable[..., Any],
        rule: Rule,
        arguments: Arguments,
    ) -> Any:
        plan = self._planner.plan(
            self._inspector.inspect_callable(function),
            rule.constructor_args,
        )

        self._publish(nid, None)
        instance = self._resolver.resolve(plan, arguments).invoke(function)
        self._instances[nid] = instance
        return instance

    def _construct_shared(
        self,
        nid: str,
        cls: type[Any],
        rule: Rule,
        arguments: Arguments,
    ) -> Any:
        descriptors = self._inspector.inspect_callable(cls)
        if not descriptors:
            instance = cls()
            self._publish(nid, instance)
            return instance

        plan = self._planner.plan(descriptors, rule.constructor_args)
        if cls.__new__ is not object.__new__:
            # The class allocates in __new__, so only a null placeholder can be published.
            self._publish(nid, None)
            instance = self._resolver.resolve(plan, arguments).invoke(cls)
            self._instances[nid] = instance
            return instance

        # Allocate first so cyclic dependencies receive the instance being built.
        instance = object.__new__(cls)
        self._publish(nid, instance)
        resolved = self._resolver.resolve(plan, arguments)
        cls.__init__(instance, *resolved.args, **resolved.kwargs)
        return instance

    def _publish(self, nid: str, instance: Any) -> None:
        self._instances[nid] = instance
        logger.debug("Published shared instance slot for %s", nid)

    def _find_class(self, nid: str, rule: Rule) -> type[Any]:
        class_name = rule.class_name or nid
        cls = self._catalog.find(class_name)
        if cls is None:
            msg = f"Class {class_name} does not exist."
            raise DIRulesNotFoundError(msg)
        if is_interface_class(cls):
            msg = f"Class {class_name} is an interface and cannot be instantiated."
            raise DIRulesNotFoundError(msg)
        if inspect.isabstract(cls):
            msg = f"Class {class_name} is abstract and cannot be instantiated."
            raise DIRulesNotFoundError(msg)
        return cls

    def _plan_calls(self, cls: type[Any], calls: Sequence[RuleCall]) -> CallPlans:
        return [
            (
                call.method,
                self._planner.plan(self._inspector.inspect_method(cls, call.method), call.args),
            )
            for call in calls
        ]

    def _run_calls(self, instance: Any, call_plans: CallPlans) -> None:
        for method_name, plan in call_plans:
            resolved = self._resolver.resolve(plan, Arguments(), instance)
            resolved.invoke(getattr(instance, method_name))

    @contextmanager
    def _tracking(self, nid: str, *, shared: bool) -> Iterator[None]:
        if not shared:
            self._check_cycle(nid)
        self._in_flight.append((nid, shared))
        try:
            yield
        finally:
            self._in_flight.pop()

    def _check_cycle(self, nid: str) -> None:
        # A shared entry between two visits of nid breaks the loop through its placeholder.
        for index in range(len(self._in_flight) - 1, -1, -1):
            in_flight_id, in_flight_shared = self._in_flight[index]
            if in_flight_shared:
                return
            if in_flight_id == nid:
                chain = [entry_id for entry_id, _ in self._in_flight[index:]]
                raise DIRulesCircularDependencyError([*chain, nid])
