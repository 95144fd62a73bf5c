"""Tests for dataclasses integration."""

from dataclasses import dataclass, field, make_dataclass
from typing import Any

from dirules import Container, Reference


class DepService:
    pass


@dataclass
class DataclassModelWithDep:
    dep: DepService


@dataclass
class NestedDataclassModel:
    model: DataclassModelWithDep


@dataclass
class DataclassModelWithDefault:
    dep: DepService
    name: str = "default"
    tags: list[str] = field(default_factory=list)


@dataclass
class EmptyDataclassModel:
    pass


@dataclass(frozen=True, slots=True)
class FrozenSlottedModel:
    dep: DepService


@dataclass(kw_only=True)
class KeywordOnlyModel:
    dep: DepService
    name: str = "keyword"


class TestDataclassResolution:
    def test_resolve_dataclass_with_dependency(self, container: Container) -> None:
        """Dataclass with a dependency field resolves correctly."""
        result = container.get(DataclassModelWithDep)

        assert isinstance(result, DataclassModelWithDep)
        assert isinstance(result.dep, DepService)

    def test_resolve_empty_dataclass(self, container: Container) -> None:
        """Dataclass with no fields resolves correctly."""
        result = container.get(EmptyDataclassModel)

        assert isinstance(result, EmptyDataclassModel)

    def test_resolve_dataclass_with_default(self, container: Container) -> None:
        """Dataclass defaults and default factories are kept."""
        result = container.get(DataclassModelWithDefault)

        assert isinstance(result.dep, DepService)
        assert result.name == "default"
        assert result.tags == []

    def test_resolve_nested_dataclasses(self, container: Container) -> None:
        """Nested dataclass dependency chain resolves correctly."""
        result = container.get(NestedDataclassModel)

        assert isinstance(result.model, DataclassModelWithDep)
        assert isinstance(result.model.dep, DepService)

    def test_shared_dependency_is_injected_once(self, container: Container) -> None:
        """A shared field type is the same instance across dataclasses."""
        container.rule(DepService).set_shared(True)

        first = container.get(DataclassModelWithDep)
        nested = container.get(NestedDataclassModel)

        assert first.dep is nested.model.dep

    def test_frozen_slotted_dataclass(self, container: Container, shared: bool) -> None:
        """Frozen slotted dataclasses resolve on both construction paths."""
        container.set_shared(shared)

        result = container.get(FrozenSlottedModel)

        assert isinstance(result.dep, DepService)

    def test_keyword_only_dataclass(self, container: Container) -> None:
        """Keyword-only dataclass fields are passed by keyword."""
        container.rule(KeywordOnlyModel).set_constructor_args({"name": "configured"})

        result = container.get(KeywordOnlyModel)

        assert isinstance(result.dep, DepService)
        assert result.name == "configured"

    def test_reference_to_dataclass_field(self, container: Container) -> None:
        """A reference fills a dataclass field from another identifier."""
        dep = DepService()
        container.set_instance("dep", dep)
        container.rule(DataclassModelWithDep).set_constructor_args([Reference("dep")])

        assert container.get(DataclassModelWithDep).dep is dep

    def test_resolve_make_dataclass(self, container: Container) -> None:
        """make_dataclass models resolve correctly."""
        dynamic_model = make_dataclass(
            "DynamicModel",
            [("dep", DepService), ("name", str, field(default="default"))],
        )

        result: Any = container.get(dynamic_model)

        assert isinstance(result, dynamic_model)
        assert isinstance(result.dep, DepService)
        assert result.name == "default"
