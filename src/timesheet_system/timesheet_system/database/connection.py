from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import mysql.connector
from mysql.connector.constants import ClientFlag

from ..core.constants import TRANSACTION_ISOLATION

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Outside a transaction every repository call opens a short-lived connection.
    Inside ``transaction()`` all calls made from the same context share one
    connection, committed or rolled back when the block exits.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pinned: ContextVar[Any] = ContextVar(f"pinned_conn_{id(self)}", default=None)

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            # rowcount = matched rows, not changed rows.
            client_flags=[ClientFlag.FOUND_ROWS],
        )

    def current(self):
        """Connection pinned by an enclosing ``transaction()``, if any."""
        return self._pinned.get()

    @contextmanager
    def transaction(self, *, isolation_level: str = TRANSACTION_ISOLATION) -> Iterator[Any]:
        outer = self._pinned.get()
        if outer is not None:
            # Nested blocks join the outer transaction.
            yield outer
            return

        conn = self.connect()
        token = self._pinned.set(conn)
        try:
            conn.start_transaction(isolation_level=isolation_level)
            yield conn
            conn.commit()
        except Exception:
            logger.debug("Rolling back transaction", exc_info=True)
            conn.rollback()
            raise
        finally:
            self._pinned.reset(token)
            conn.close()
