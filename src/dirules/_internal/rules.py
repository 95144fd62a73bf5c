from __future__ import annotations

import copy
import inspect
import logging
import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any

from dirules._internal.defaults import WILDCARD_RULE_ID
from dirules._internal.references import RESOLVABLE_TYPES, ArgumentsSpec
from dirules._internal.type_catalog import TypeCatalog

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RuleCall:
    """A method to invoke on a freshly built instance."""

    method: str
    args: ArgumentsSpec


@dataclass(slots=True)
class Rule:
    """Configuration attached to one identifier.

    Every field is optional. ``None`` means "not set here", which lets a
    rule inherit the field from a base class rule, an interface rule, or the
    wildcard rule when the effective rule is assembled.
    """

    class_name: str | None = None
    """Identifier of the class to build instead of the rule's own identifier."""
    alias_of: str | None = None
    """Identifier this rule redirects to."""
    factory: Callable[..., Any] | None = None
    """Callable that builds the entry instead of the class constructor."""
    shared: bool | None = None
    """Build once and reuse the instance for the container lifetime."""
    inherit: bool | None = None
    """Let subclasses and implementers pick this rule up. Unset counts as true."""
    constructor_args: ArgumentsSpec | None = None
    """Arguments for the constructor or factory."""
    calls: list[RuleCall] | None = None
    """Methods to invoke after construction, in order."""

    def is_empty(self) -> bool:
        return all(getattr(self, rule_field.name) is None for rule_field in fields(self))

    def merge_missing(self, other: Rule) -> None:
        """Copy every field of ``other`` that is not set on this rule yet.

        Args:
            other: Rule with lower precedence.

        """
        for rule_field in fields(self):
            if getattr(self, rule_field.name) is not None:
                continue
            value = getattr(other, rule_field.name)
            if isinstance(value, list):
                value = list(value)
            setattr(self, rule_field.name, value)

    def copy(self) -> Rule:
        rule = Rule()
        rule.merge_missing(self)
        return rule


def copy_rules(rules: Mapping[str, Rule], replacements: dict[int, Any]) -> dict[str, Rule]:
    """Copy a rule table for another container.

    Rules, calls, resolvable values, lists, tuples and dicts are copied, so
    the copy shares no configuration structure with the source. Methods
    bound to an object listed in ``replacements`` are rebound to its
    replacement. Any other argument value, such as a connection passed as a
    constructor argument, is kept as the same object.

    Args:
        rules: Rule table to copy.
        replacements: Maps ``id()`` of an object to the object that takes
            its place in the copy.

    """
    return {nid: _copy_rule_value(rule, replacements) for nid, rule in rules.items()}


def _copy_rule_value(value: Any, replacements: dict[int, Any]) -> Any:
    if isinstance(value, (Rule, RuleCall, *RESOLVABLE_TYPES)):
        copied = copy.copy(value)
        for value_field in fields(value):
            setattr(
                copied,
                value_field.name,
                _copy_rule_value(getattr(value, value_field.name), replacements),
            )
        return copied
    if type(value) is list:
        return [_copy_rule_value(item, replacements) for item in value]
    if type(value) is tuple:
        return tuple(_copy_rule_value(item, replacements) for item in value)
    if type(value) is dict:
        return {key: _copy_rule_value(item, replacements) for key, item in value.items()}
    if inspect.ismethod(value) and id(value.__self__) in replacements:
        return types.MethodType(value.__func__, replacements[id(value.__self__)])
    return value


def make_wildcard_rule() -> Rule:
    """Return the rule every container starts with under ``"*"``."""
    return Rule(inherit=True)


class RuleResolver:
    """Merge rules along the type hierarchy into one effective rule.

    Precedence, highest first: the identifier's own rule, the nearest base
    class rules that did not opt out of inheritance, then the wildcard rule.
    Interface rules only fill ``shared`` and ``constructor_args`` gaps, but
    their ``calls`` always stack onto the result.
    """

    def __init__(self, rules: dict[str, Rule], catalog: TypeCatalog) -> None:
        self._rules = rules
        self._catalog = catalog

    def make_effective_rule(self, nid: str) -> Rule:
        """Build the effective rule for a normalized identifier.

        Args:
            nid: Normalized identifier.

        """
        own_rule = self._rules.get(nid)
        rule = own_rule.copy() if own_rule is not None else Rule()
        wildcard = self._rules[WILDCARD_RULE_ID]

        if not self._catalog.exists(nid) or self._catalog.is_interface(nid):
            if wildcard.inherit:
                rule.merge_missing(wildcard)
            return rule

        merged_from: list[str] = []
        for parent in self._catalog.parents(nid):
            parent_rule = self._rules.get(parent)
            if parent_rule is None:
                continue
            if parent_rule.inherit is False:
                break
            rule.merge_missing(parent_rule)
            merged_from.append(parent)

        if wildcard.inherit:
            rule.merge_missing(wildcard)

        for interface in self._catalog.interfaces(nid):
            interface_rule = self._rules.get(interface)
            if interface_rule is None or interface_rule.inherit is False:
                continue
            if rule.shared is None:
                rule.shared = interface_rule.shared
            if rule.constructor_args is None:
                rule.constructor_args = interface_rule.constructor_args
            if interface_rule.calls:
                rule.calls = [*(rule.calls or []), *interface_rule.calls]
            merged_from.append(interface)

        if merged_from:
            logger.debug("Effective rule for %s merged from %s", nid, ", ".join(merged_from))
        return rule
