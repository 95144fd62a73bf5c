"""Classes shared by the container tests."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class DbInterface(ABC):
    pass


class Db(DbInterface):
    def __init__(self, name="localhost") -> None:
        self.name = name


class PdoDb(Db):
    def __init__(self, name="localhost") -> None:
        super().__init__(name)
        self.i = 0

    def inc(self) -> None:
        self.i += 1

    def name_db(self, db: Db, name) -> None:
        db.name = name


class ExtendedPdoDb(PdoDb):
    pass


class DbDecorator(DbInterface):
    def __init__(self, db: DbInterface | None = None) -> None:
        self.db = db if db is not None else Db("default")


class FooAware(ABC):
    @abstractmethod
    def set_foo(self, foo) -> None: ...


class Foo(FooAware):
    foo: Any = None
    bar: Any = None

    def set_foo(self, foo) -> None:
        self.foo = foo

    def set_bar(self, bar) -> None:
        self.bar = bar

    @classmethod
    def create(cls) -> Foo:
        return cls()


class FooConsumer:
    def __init__(self, foo: FooAware) -> None:
        self.foo = foo


class Sql:
    def __init__(self, db: Db | None = None, name="Sql") -> None:
        self.db = db
        self.name = name

    def set_db(self, db: Db) -> None:
        self.db = db


class Model:
    def __init__(self, sql: Sql) -> None:
        self.sql = sql

    def set_sql(self, sql: Sql) -> None:
        self.sql = sql


class Tuple:
    def __init__(self, a=None, b=None) -> None:
        self.a = a
        self.b = b

    def set_a(self, value) -> None:
        self.a = value

    def set_b(self, value) -> None:
        self.b = value


class CircleA:
    def __init__(self, b: CircleB) -> None:
        self.ref = b


class CircleB:
    def __init__(self, c: CircleC) -> None:
        self.ref = c


class CircleC:
    def __init__(self, a: CircleA) -> None:
        self.ref = a


class NotFoundRequiredConsumer:
    def __init__(self, foo: SomeNonExistentInterface, config_value) -> None:  # noqa: F821
        self.foo = foo
        self.config_value = config_value


class NotFoundOptionalConsumer:
    def __init__(
        self,
        foo: SomeNonExistentInterface | None = None,  # noqa: F821
        config_value=False,  # noqa: FBT002
    ) -> None:
        self.foo = foo
        self.config_value = config_value


class ParentClass:
    pass


class ChildClass(ParentClass):
    pass


class UnionTypeBasicWithDefaults:
    def __init__(self, a: int | float = 2, b: str = "hello") -> None:
        self.a = a
        self.b = b


class UnionTypeBasicWithoutDefault:
    def __init__(self, a: int | float, b: str) -> None:
        self.a = a
        self.b = b


class UnionTypeComplex:
    def __init__(self, a: str | ChildClass, b: str | None) -> None:
        self.a = a
        self.b = b


class KeywordOnlySql:
    def __init__(self, *, db: Db, name: str = "keyword") -> None:
        self.db = db
        self.name = name


class Exploding:
    def __init__(self) -> None:
        msg = "constructor failed"
        raise RuntimeError(msg)


class ExplodingConsumer:
    def __init__(self, exploding: Exploding) -> None:
        self.exploding = exploding


def set_db_name(db: Db, name) -> Db:
    db.name = name
    return db


class Service(ABC):
    def __init__(self, name="svc") -> None:
        self.name = name


class Worker(ABC):
    def __init__(self, name="worker") -> None:
        self.name = name

    @abstractmethod
    def run(self) -> str: ...


class ReportWorker(Worker):
    def run(self) -> str:
        return f"report from {self.name}"


class NightlyReportWorker(ReportWorker):
    pass


class WorkerConsumer:
    def __init__(self, worker: Worker) -> None:
        self.worker = worker
