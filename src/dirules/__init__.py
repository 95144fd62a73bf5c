from dirules._internal.container import Container
from dirules._internal.references import (
    Callback,
    DefaultReference,
    Reference,
    RequiredParameter,
)
from dirules._internal.type_catalog import RuntimeTypeCatalog, TypeCatalog
from dirules.container_interface import ContainerConfiguration
from dirules.exceptions import (
    DIRulesCircularDependencyError,
    DIRulesError,
    DIRulesInvalidCallbackError,
    DIRulesMissingArgumentError,
    DIRulesNotFoundError,
    DIRulesUnionTypeError,
)

__all__ = [
    "Callback",
    "Container",
    "ContainerConfiguration",
    "DIRulesCircularDependencyError",
    "DIRulesError",
    "DIRulesInvalidCallbackError",
    "DIRulesMissingArgumentError",
    "DIRulesNotFoundError",
    "DIRulesUnionTypeError",
    "DefaultReference",
    "Reference",
    "RequiredParameter",
    "RuntimeTypeCatalog",
    "TypeCatalog",
]
