"""Run-scoped registry of buckets and objects created by test steps.

Later steps depend on state created by earlier ones ("the first bucket",
"an object uploaded earlier"), and cleanup removes everything recorded
here once the run is over. Each registry is split into partitions by how
an entry was created; partitions are append-only for the run's lifetime.

Appends and reads take a per-partition lock, and reads return tuple
snapshots, so steps may safely run concurrently if a caller chooses to.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from s3verify.errors import EmptyPartition


class Partition(str, Enum):
    """How a registered bucket or object came to exist."""

    AD_HOC = "ad-hoc"
    PREPARED = "prepared"
    COPIED = "copied"


@dataclass(frozen=True)
class BucketDescriptor:
    """A bucket known to the run."""

    name: str


@dataclass(frozen=True)
class ObjectDescriptor:
    """An object uploaded during the run.

    Attributes:
        key: Object key, unique within its bucket.
        body: The exact bytes uploaded.
        bucket: Bucket the object lives in.
    """

    key: str
    body: bytes
    bucket: str = ""


T = TypeVar("T")


class Registry(Generic[T]):
    """Append-only, partitioned, insertion-ordered registry."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._entries: dict[Partition, list[T]] = {p: [] for p in Partition}
        self._locks: dict[Partition, threading.Lock] = {p: threading.Lock() for p in Partition}

    def append(self, partition: Partition, entry: T) -> None:
        """Record ``entry`` at the end of ``partition``."""
        with self._locks[partition]:
            self._entries[partition].append(entry)

    def all(self, partition: Partition) -> tuple[T, ...]:
        """Return a snapshot of ``partition`` in insertion order."""
        with self._locks[partition]:
            return tuple(self._entries[partition])

    def first(self, partition: Partition) -> T:
        """Return the earliest entry in ``partition``.

        Raises:
            EmptyPartition: If nothing has been appended to ``partition``.
        """
        with self._locks[partition]:
            entries = self._entries[partition]
            if not entries:
                raise EmptyPartition(self.kind, partition.value)
            return entries[0]

    def count(self, partition: Partition) -> int:
        with self._locks[partition]:
            return len(self._entries[partition])


class RunContext:
    """State shared by every step in one run.

    Attributes:
        transport: Executes requests against the server under test.
        buckets: Buckets available to steps.
        objects: Objects created by steps.
        prepared: Whether setup already populated the "prepared" partitions.
    """

    def __init__(self, transport, prepared: bool = False) -> None:
        self.transport = transport
        self.prepared = prepared
        self.buckets: Registry[BucketDescriptor] = Registry("bucket")
        self.objects: Registry[ObjectDescriptor] = Registry("object")

    @property
    def bucket_partition(self) -> Partition:
        """Partition to take the target bucket from in the current mode."""
        return Partition.PREPARED if self.prepared else Partition.AD_HOC
