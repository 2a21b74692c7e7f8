"""In-memory stand-ins for the MySQL and MongoDB servers used by the benchmark."""
import itertools
import re
import threading
from collections import defaultdict
from types import SimpleNamespace

import matplotlib

matplotlib.use("Agg")

import mysql.connector
import pytest
from loguru import logger
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

import benchmarker
from clients import mongo_config, mysql_config

_DROP = re.compile(r"DROP TABLE IF EXISTS `(\w+)`")
_CREATE = re.compile(r"CREATE TABLE `(\w+)`")
_INSERT = re.compile(r"INSERT INTO `(\w+)` \(([^)]*)\)")
_COUNT = re.compile(r"SELECT COUNT\(\*\) AS total FROM `(\w+)`")

FOREIGN_KEYS = {
    "orders": {"customer_id": "customers", "table_id": "tables"},
    "order_items": {"order_id": "orders", "product_id": "products"},
}


class FakeMySQLServer:
    def __init__(self):
        self.tables = {}
        self.next_ids = {}
        self.executed = []
        self.connections = []
        self.lock = threading.Lock()
        self.reachable = True
        self.fail_on = None
        # the main dictionary cursor raises on close, like a cursor with an unread result
        self.fail_cursor_close = False

    def connect(self, **config):
        if not self.reachable:
            raise mysql.connector.errors.InterfaceError("Can't connect to MySQL server")
        conn = FakeConnection(self)
        with self.lock:
            self.connections.append(conn)
        return conn

    def execute(self, query, params):
        query = " ".join(query.split())
        with self.lock:
            self.executed.append(query)
            match = _DROP.match(query)
            if match:
                self._drop(match.group(1))
                return [], None
            match = _CREATE.match(query)
            if match:
                self.tables[match.group(1)] = []
                self.next_ids[match.group(1)] = itertools.count(1)
                return [], None
            match = _INSERT.match(query)
            if match:
                columns = [c.strip() for c in match.group(2).split(",")]
                return [], self._insert(match.group(1), dict(zip(columns, params)))
            match = _COUNT.match(query)
            if match:
                return [{"total": len(self._table(match.group(1)))}], None
            if "JOIN" in query:
                return self._order_details(), None
        raise mysql.connector.errors.ProgrammingError(f"unsupported statement: {query}")

    def _table(self, name):
        if name not in self.tables:
            raise mysql.connector.errors.ProgrammingError(f"Table '{name}' doesn't exist")
        return self.tables[name]

    def _drop(self, name):
        for child, references in FOREIGN_KEYS.items():
            if child in self.tables and name in references.values():
                raise mysql.connector.errors.IntegrityError(
                    f"Cannot drop table '{name}' referenced by '{child}'"
                )
        self.tables.pop(name, None)

    def _insert(self, name, row):
        rows = self._table(name)
        if name == self.fail_on:
            raise mysql.connector.errors.IntegrityError(f"insert into '{name}' rejected")
        if name == "tables" and row["status"] not in ("free", "occupied"):
            raise mysql.connector.errors.IntegrityError("Check constraint violated")
        for column, parent in FOREIGN_KEYS.get(name, {}).items():
            if not any(r["id"] == row[column] for r in self.tables[parent]):
                raise mysql.connector.errors.IntegrityError(
                    f"foreign key {name}.{column} -> {parent} fails"
                )
        row["id"] = next(self.next_ids[name])
        rows.append(row)
        return row["id"]

    def _order_details(self):
        def by_id(name):
            return {r["id"]: r for r in self.tables[name]}

        customers, orders, products = by_id("customers"), by_id("orders"), by_id("products")
        details = []
        for item in self.tables["order_items"]:
            order = orders[item["order_id"]]
            details.append({
                "name": customers[order["customer_id"]]["name"],
                "id": order["id"],
                "product_name": products[item["product_id"]]["name"],
                "quantity": item["quantity"],
            })
        return details


class FakeCursor:
    def __init__(self, server, dictionary=False):
        self.server = server
        self.dictionary = dictionary
        self.lastrowid = None
        self.closed = False
        self._rows = []

    def execute(self, query, params=None):
        self._rows, lastrowid = self.server.execute(query, params)
        if lastrowid is not None:
            self.lastrowid = lastrowid

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def close(self):
        if self.dictionary and self.server.fail_cursor_close:
            raise mysql.connector.errors.InternalError("Unread result found")
        self.closed = True


class FakeConnection:
    def __init__(self, server):
        self.server = server
        self.commits = 0
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self.server, dictionary)

    def commit(self):
        self.commits += 1

    def close(self):
        self.closed = True


class FakeCollection:
    def __init__(self, server, name):
        self.server = server
        self.name = name
        self.docs = []
        self._ids = itertools.count(1)

    def _check(self):
        if self.name == self.server.fail_on:
            raise OperationFailure(f"write to '{self.name}' rejected")

    def insert_one(self, doc):
        self._check()
        doc.setdefault("_id", next(self._ids))
        self.docs.append(dict(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    def insert_many(self, docs):
        self._check()
        ids = [self.insert_one(doc).inserted_id for doc in docs]
        return SimpleNamespace(inserted_ids=ids)

    def delete_many(self, query):
        assert query == {}
        deleted = len(self.docs)
        self.docs.clear()
        return SimpleNamespace(deleted_count=deleted)

    def find(self, query):
        assert query == {}
        return iter([dict(doc) for doc in self.docs])

    def count_documents(self, query):
        assert query == {}
        return len(self.docs)


class FakeMongoServer:
    def __init__(self):
        self.databases = defaultdict(dict)
        self.clients = []
        self.reachable = True
        self.fail_on = None

    def client(self, uri, **kwargs):
        client = FakeMongoClient(self)
        self.clients.append(client)
        return client

    def collection(self, db, name):
        collections = self.databases[db]
        if name not in collections:
            collections[name] = FakeCollection(self, name)
        return collections[name]


class FakeMongoClient:
    def __init__(self, server):
        self.server = server
        self.closed = False
        self.admin = SimpleNamespace(command=self._command)

    def _command(self, name):
        if not self.server.reachable:
            raise ServerSelectionTimeoutError("localhost:27017: connection refused")
        return {"ok": 1.0}

    def __getitem__(self, db):
        return FakeDatabase(self.server, db)

    def close(self):
        self.closed = True


class FakeDatabase:
    def __init__(self, server, name):
        self.server = server
        self.name = name

    def __getitem__(self, collection):
        return self.server.collection(self.name, collection)


@pytest.fixture
def mysql_server(monkeypatch):
    server = FakeMySQLServer()
    monkeypatch.setattr(mysql.connector, "connect", server.connect)
    return server


@pytest.fixture
def mongo_server(monkeypatch):
    server = FakeMongoServer()
    monkeypatch.setattr(benchmarker, "MongoClient", server.client)
    return server


@pytest.fixture
def benchmark(mysql_server, mongo_server):
    return benchmarker.CafeBenchmark(mysql_config, mongo_config, threads=4)


@pytest.fixture
def seeded(benchmark):
    benchmark.connect()
    benchmark.reset_mysql_schema()
    benchmark.reset_mongo()
    benchmark.populate_mysql()
    benchmark.populate_mongo()
    yield benchmark
    benchmark.close()


@pytest.fixture
def error_logs():
    messages = []
    handler_id = logger.add(messages.append, level="ERROR")
    yield messages
    logger.remove(handler_id)
