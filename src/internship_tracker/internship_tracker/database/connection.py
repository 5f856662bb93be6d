from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` mapping; ``port`` defaults to 3306."""
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config.get("password") or ""),
            database=str(db_config["database"]),
        )

    def connect_args(self, *, with_database: bool = True) -> dict:
        args = {"host": self.host, "port": self.port, "user": self.user, "password": self.password}
        if with_database:
            args["database"] = self.database
        return args


class DatabaseConnection:
    """Opens one MySQL connection per unit of work.

    Connections are never autocommit: ``db_cursor`` owns commit and
    rollback, so every service operation is a single transaction.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(**self._config.connect_args(), autocommit=False)
