"""Tests for alias indirection."""

import logging

import pytest

from dirules import Container
from tests.fixtures import Db, PdoDb


class TestAliases:
    def test_add_alias(self, container: Container) -> None:
        """An alias resolves to the shared instance of its target."""
        container.rule(Db).set_shared(True).add_alias("db")

        assert container.get("db") is container.get(Db)

    def test_add_many_aliases(self, container: Container) -> None:
        """Several aliases can be added in one call."""
        container.rule(Db).add_alias("db", "database")

        assert sorted(container.get_aliases()) == ["database", "db"]
        assert isinstance(container.get("database"), Db)

    def test_set_alias_of(self, container: Container) -> None:
        """A rule can redirect to another identifier."""
        container.rule(PdoDb).set_shared(True).rule("main_db").set_alias_of(PdoDb)

        assert container.get_alias_of() == "tests.fixtures.PdoDb"
        assert container.get("main_db") is container.get(PdoDb)

    def test_alias_chain(self, container: Container) -> None:
        """Aliases are followed transitively."""
        container.rule("a").set_alias_of("b").rule("b").set_alias_of(Db)

        assert isinstance(container.get("a"), Db)

    def test_alias_passes_arguments(self, container: Container) -> None:
        """Call-time arguments follow the alias."""
        container.rule(Db).add_alias("db")

        assert container.get_args("db", ["aliased"]).name == "aliased"

    def test_alias_ignores_own_shared_flag(self, container: Container) -> None:
        """The alias identifier never caches an instance of its own."""
        container.rule(Db).add_alias("db").rule("db").set_shared(True)

        assert container.get("db") is not container.get("db")
        assert not container.has_instance("db")

    def test_remove_alias(self, container: Container) -> None:
        """Removed aliases no longer resolve."""
        container.rule(Db).add_alias("db").remove_alias("db")

        assert container.get_aliases() == []
        assert not container.has_rule("db")

    def test_add_alias_to_self_is_ignored(
        self,
        container: Container,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Aliasing a rule to itself logs a warning and does nothing."""
        with caplog.at_level(logging.WARNING, logger="dirules"):
            container.rule("db").add_alias("db")

        assert container.get_aliases() == []
        assert "Tried to set alias 'db' to self." in caplog.text

    def test_set_alias_of_self_is_ignored(
        self,
        container: Container,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Pointing a rule at itself logs a warning and does nothing."""
        with caplog.at_level(logging.WARNING, logger="dirules"):
            container.rule("db").set_alias_of("db")

        assert container.get_alias_of() == ""
        assert "cannot be an alias of itself" in caplog.text

    def test_remove_foreign_alias_warns(
        self,
        container: Container,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Removing an alias that points elsewhere logs a warning but removes it."""
        container.rule(Db).add_alias("db")

        with caplog.at_level(logging.WARNING, logger="dirules"):
            container.rule(PdoDb).remove_alias("db")

        assert "points to 'tests.fixtures.Db'" in caplog.text
        assert container.rule(Db).get_aliases() == []
