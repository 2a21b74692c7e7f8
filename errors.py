from contextlib import contextmanager

import mysql.connector
from pymongo.errors import PyMongoError


class BenchmarkError(Exception):
    """Base class for failures raised while benchmarking a store."""


class ConnectivityError(BenchmarkError):
    """A store could not be reached when opening the connection."""

    def __init__(self, store, cause):
        super().__init__(f"{store} is unreachable: {cause}")
        self.store = store


class QueryError(BenchmarkError):
    """A single statement or command was rejected by a store."""

    def __init__(self, store, action, cause):
        super().__init__(f"{store} {action} failed: {cause}")
        self.store = store
        self.action = action


@contextmanager
def query_errors(store, action):
    try:
        yield
    except (mysql.connector.Error, PyMongoError) as e:
        raise QueryError(store, action, e) from e
