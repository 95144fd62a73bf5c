"""Tests for reading and writing rule fields through the container."""

from dirules import Container, ContainerConfiguration
from tests.fixtures import Db, Foo, PdoDb


def test_container_is_container_configuration() -> None:
    container = Container()
    assert isinstance(container, ContainerConfiguration)
    assert issubclass(Container, ContainerConfiguration)


class TestRuleAccess:
    def test_default_rule(self, container: Container) -> None:
        """The wildcard rule starts out inheriting and otherwise empty."""
        assert container.get_class() == ""
        assert container.get_inherit() is True
        assert container.is_shared() is False
        assert container.get_constructor_args() == []
        assert container.get_factory() is None
        assert container.get_alias_of() == ""

    def test_getters_setters(self, container: Container) -> None:
        """Every setter is visible through its getter."""
        container.set_class("tests.fixtures.Foo")
        assert container.get_class() == "tests.fixtures.Foo"

        container.set_inherit(False)
        assert container.get_inherit() is False

        container.set_shared(True)
        assert container.is_shared() is True

        args = [123]
        container.set_constructor_args(args)
        assert container.get_constructor_args() is args

        def factory() -> str:
            return "foo"

        container.set_factory(factory)
        assert container.get_factory() is factory

    def test_set_class_accepts_classes(self, container: Container) -> None:
        """Classes passed to set_class are stored by their dotted path."""
        container.rule(Db).set_class(Foo)

        assert container.get_class() == "tests.fixtures.Foo"

    def test_setters_return_container(self, container: Container) -> None:
        """Every setter can be chained."""
        result = (
            container.rule(Db)
            .set_class(PdoDb)
            .set_shared(True)
            .set_inherit(True)
            .set_constructor_args([])
            .add_call("inc")
            .set_factory(None)
            .add_alias("db")
            .remove_alias("db")
            .set_instance("x", 1)
            .clear_instances()
            .default_rule()
        )

        assert result is container

    def test_has_default_rule(self, container: Container) -> None:
        """The wildcard rule always exists."""
        assert container.has_rule("*")

    def test_has_rule(self, container: Container) -> None:
        """A configured rule is reported."""
        assert not container.has_rule("foo")

        container.rule("foo").set_class(Db)

        assert container.has_rule("foo")

    def test_not_has_new_selected_rule(self, container: Container) -> None:
        """Selecting a rule without configuring it does not define it."""
        assert not container.has_rule("foo")

        container.rule("foo")

        assert not container.has_rule("foo")

    def test_subclass_has_rule(self, container: Container) -> None:
        """A base class rule is not reported for subclasses."""
        container.rule(Db).set_class(PdoDb)

        assert not container.has_rule(PdoDb)

    def test_rule_selection_is_sticky(self, container: Container) -> None:
        """Setters modify the most recently selected rule."""
        container.rule(Db).set_constructor_args(["db"])
        container.rule(PdoDb)
        container.set_constructor_args(["pdo"])

        assert container.rule(Db).get_constructor_args() == ["db"]
        assert container.rule(PdoDb).get_constructor_args() == ["pdo"]
