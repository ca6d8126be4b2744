from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from docdb_demo.errors import ConfigurationError


class ReadConcernLevel(str, Enum):
    """Read concern levels"""
    LOCAL = "local"
    AVAILABLE = "available"
    MAJORITY = "majority"
    LINEARIZABLE = "linearizable"
    SNAPSHOT = "snapshot"


class WriteConcernLevel(str, Enum):
    """Write concern levels"""
    W0 = "w0"  # No acknowledgment
    W1 = "w1"  # Acknowledge from primary
    W2 = "w2"  # Acknowledge from primary + 1 secondary
    W3 = "w3"  # Acknowledge from primary + 2 secondaries
    MAJORITY = "majority"  # Acknowledge from majority

    @property
    def w(self):
        """Value of the `w` option understood by the driver"""
        if self is WriteConcernLevel.MAJORITY:
            return "majority"
        return int(self.value[1:])


class ClientOptions(BaseModel):
    """Immutable connection configuration for the MongoDB client"""
    uri: str = Field(..., description="MongoDB connection string")
    write_concern: WriteConcernLevel = Field(
        default=WriteConcernLevel.MAJORITY,
        description="Acknowledgement required before a write succeeds"
    )
    write_concern_timeout_ms: Optional[int] = Field(
        default=5000,
        description="Upper bound on waiting for write acknowledgement"
    )
    read_concern: ReadConcernLevel = Field(
        default=ReadConcernLevel.MAJORITY,
        description="Consistency level applied to reads"
    )
    retry_writes: bool = Field(default=True, description="Retry writes once on transient failure")
    retry_reads: bool = Field(default=True, description="Retry reads once on transient failure")
    compressors: Tuple[str, ...] = Field(default=("snappy",), description="Wire compressors, in preference order")
    server_selection_timeout_ms: int = Field(default=30000, description="Server selection timeout")
    app_name: Optional[str] = Field(None, description="Application name reported to the server")
    tz_aware: bool = Field(default=True, description="Decode datetimes as timezone-aware UTC")

    model_config = ConfigDict(frozen=True)

    def to_client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for pymongo.MongoClient"""
        kwargs: Dict[str, Any] = {
            "w": self.write_concern.w,
            "readConcernLevel": self.read_concern.value,
            "retryWrites": self.retry_writes,
            "retryReads": self.retry_reads,
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "tz_aware": self.tz_aware,
        }
        if self.write_concern_timeout_ms is not None:
            kwargs["wTimeoutMS"] = self.write_concern_timeout_ms
        if self.compressors:
            kwargs["compressors"] = ",".join(self.compressors)
        if self.app_name:
            kwargs["appname"] = self.app_name
        return kwargs


class ClientOptionsBuilder:
    """Step-by-step construction of ClientOptions"""

    def __init__(self):
        self._values: Dict[str, Any] = {}

    @classmethod
    def from_settings(cls, settings) -> "ClientOptionsBuilder":
        """Seed a builder from application settings"""
        return (
            cls()
            .with_uri(settings.mongodb_uri)
            .with_write_concern(settings.write_concern, settings.write_concern_timeout_ms)
            .with_read_concern(settings.read_concern)
            .with_retries(writes=settings.retry_writes, reads=settings.retry_reads)
            .with_compressors(settings.compressors)
            .with_server_selection_timeout(settings.server_selection_timeout_ms)
            .with_app_name(settings.app_name)
        )

    def with_uri(self, uri: str) -> "ClientOptionsBuilder":
        self._values["uri"] = uri
        return self

    def with_write_concern(self, level, timeout_ms: Optional[int] = None) -> "ClientOptionsBuilder":
        try:
            self._values["write_concern"] = WriteConcernLevel(level)
        except ValueError as e:
            raise ConfigurationError(f"Unknown write concern {level!r}", {"write_concern": level}) from e
        self._values["write_concern_timeout_ms"] = timeout_ms
        return self

    def with_read_concern(self, level) -> "ClientOptionsBuilder":
        try:
            self._values["read_concern"] = ReadConcernLevel(level)
        except ValueError as e:
            raise ConfigurationError(f"Unknown read concern {level!r}", {"read_concern": level}) from e
        return self

    def with_retries(self, writes: bool = True, reads: bool = True) -> "ClientOptionsBuilder":
        self._values["retry_writes"] = writes
        self._values["retry_reads"] = reads
        return self

    def with_compressors(self, compressors: List[str]) -> "ClientOptionsBuilder":
        self._values["compressors"] = tuple(compressors)
        return self

    def with_server_selection_timeout(self, timeout_ms: int) -> "ClientOptionsBuilder":
        self._values["server_selection_timeout_ms"] = timeout_ms
        return self

    def with_app_name(self, app_name: Optional[str]) -> "ClientOptionsBuilder":
        self._values["app_name"] = app_name
        return self

    def build(self) -> ClientOptions:
        """
        Validate the collected values and freeze them

        Raises:
            ConfigurationError: If the URI is missing or a timeout is negative
        """
        if not self._values.get("uri"):
            raise ConfigurationError("A MongoDB connection string is required")

        for key in ("write_concern_timeout_ms", "server_selection_timeout_ms"):
            value = self._values.get(key)
            if value is not None and value < 0:
                raise ConfigurationError(f"{key} must not be negative", {key: value})

        return ClientOptions(**self._values)


class TransactionOptions(BaseModel):
    """Immutable settings applied to a single transaction"""
    read_concern: ReadConcernLevel = Field(
        default=ReadConcernLevel.SNAPSHOT,
        description="Read concern for reads inside the transaction"
    )
    write_concern: WriteConcernLevel = Field(
        default=WriteConcernLevel.MAJORITY,
        description="Write concern used when committing"
    )
    max_commit_time_ms: int = Field(default=10000, description="Server-side bound on the commit", gt=0)
    commit_retries: int = Field(default=3, description="Commit attempts after an unknown commit result", ge=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, settings) -> "TransactionOptions":
        return cls(
            max_commit_time_ms=settings.transaction_max_commit_time_ms,
            commit_retries=settings.transaction_commit_retries,
        )

    def driver_read_concern(self) -> ReadConcern:
        return ReadConcern(level=self.read_concern.value)

    def driver_write_concern(self) -> WriteConcern:
        return WriteConcern(w=self.write_concern.w)
