"""
Idempotency graph — one keyed execution as nodnod nodes.

Architecture:
    IdempotencySpec (injected)
         │
         ▼
    SpecNode
         │
         ▼
    FetchRecordNode
         │
         ▼
    IdempotencyOutcome (@polymorphic, first matching case wins)
     ├── mismatch    live record, different fingerprint
     ├── replay      completed record, same request
     ├── in_flight   pending record, same request
     └── fresh       no record or expired: claim, execute, complete
         │
         ▼
    ResultNode

The store holds a reference (the order id), not the value itself; ``replay``
loads the value back through that reference.

Note: no ``from __future__ import annotations`` here, nodnod resolves
``__compose__`` hints at runtime.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from kungfu import Result, Ok, Error
from nodnod import NodeError, polymorphic, case

from storefront import graph as G
from storefront.errors import (
    StorefrontError,
    StorageError,
    IdempotencyConflictError,
    IdempotencyMismatchError,
)
from storefront.idempotency._types import IdempotencyRecord
from storefront.idempotency._store import IdempotencyStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Input (injected)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class IdempotencySpec:
    """
    Everything needed to run ``operation`` at most once per ``key``.

    operation: produces the value; Error results free the key again.
    identify: value → reference stored with the completed record.
    replay: reference → value, for repeated requests.
    input_hash: request fingerprint; a live key with another hash is refused.
    """

    key: str
    operation: Callable[[], Awaitable[Result[Any, StorefrontError]]]
    identify: Callable[[Any], str]
    replay: Callable[[str], Awaitable[Result[Any | None, StorageError]]]
    store: IdempotencyStore
    input_hash: str | None = None
    ttl: timedelta | None = None


@dataclass(frozen=True, slots=True)
class IdempotentResult[T]:
    value: T
    replayed: bool
    key: str


# ═══════════════════════════════════════════════════════════════════════════════
# Entry / Fetch
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class SpecNode:
    def __init__(self, spec: IdempotencySpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, spec: IdempotencySpec) -> "SpecNode":
        return cls(spec)


@G.node
class FetchRecordNode:
    """Current record for the key. Expired records read as absent."""

    def __init__(self, record: IdempotencyRecord | None, spec: IdempotencySpec) -> None:
        self.record = record
        self.spec = spec

    @classmethod
    async def __compose__(cls, spec_node: SpecNode) -> "FetchRecordNode":
        spec = spec_node.spec
        match await spec.store.get(spec.key):
            case Error(e):
                raise e
            case Ok(record):
                if record is not None and record.is_expired:
                    record = None
                return cls(record, spec)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Executed:
    value: Any


@dataclass(frozen=True)
class Replayed:
    value: Any


@dataclass(frozen=True)
class Refused:
    error: StorefrontError


type Outcome = Executed | Replayed | Refused


def _same_request(record: IdempotencyRecord, spec: IdempotencySpec) -> bool:
    if record.input_hash is None or spec.input_hash is None:
        return True
    return record.input_hash == spec.input_hash


async def _replay(spec: IdempotencySpec, reference: str | None) -> Outcome:
    if reference is None:
        return Refused(StorageError(f"Completed key {spec.key} has no reference"))

    match await spec.replay(reference):
        case Error(e):
            return Refused(e)
        case Ok(None):
            return Refused(
                StorageError(f"Key {spec.key} references missing resource {reference}")
            )
        case Ok(value):
            logger.info("Replaying idempotent request %s → %s", spec.key, reference)
            return Replayed(value)


async def _release(spec: IdempotencySpec) -> None:
    match await spec.store.release(spec.key):
        case Error(e):
            logger.error("Failed to release idempotency key %s: %s", spec.key, e.message)
        case Ok(_):
            pass


# ═══════════════════════════════════════════════════════════════════════════════
# Polymorphic Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@polymorphic[Outcome]
class IdempotencyOutcome:
    @case
    def mismatch(cls, fetch: FetchRecordNode) -> Outcome:
        record = fetch.record
        if record is None or _same_request(record, fetch.spec):
            raise NodeError("No conflicting fingerprint")
        logger.warning("Idempotency key %s reused for a different request", record.key)
        return Refused(IdempotencyMismatchError(record.key))

    @case
    async def replay(cls, fetch: FetchRecordNode) -> Outcome:
        record = fetch.record
        if record is None or not record.is_completed:
            raise NodeError("Not completed")
        return await _replay(fetch.spec, record.reference)

    @case
    def in_flight(cls, fetch: FetchRecordNode) -> Outcome:
        record = fetch.record
        if record is None or not record.is_pending:
            raise NodeError("Not pending")
        return Refused(IdempotencyConflictError(record.key))

    @case
    async def fresh(cls, fetch: FetchRecordNode) -> Outcome:
        """Claim the key, run the operation, remember what it produced."""
        if fetch.record is not None:
            raise NodeError("Record exists")
        spec = fetch.spec

        match await spec.store.claim(spec.key, spec.input_hash, spec.ttl):
            case Error(e):
                return Refused(e)
            case Ok(False):
                # Lost the race: whoever won may already be done
                match await spec.store.get(spec.key):
                    case Ok(rec) if rec is not None and not _same_request(rec, spec):
                        return Refused(IdempotencyMismatchError(spec.key))
                    case Ok(rec) if rec is not None and rec.is_completed:
                        return await _replay(spec, rec.reference)
                    case _:
                        return Refused(IdempotencyConflictError(spec.key))
            case Ok(True):
                pass

        try:
            result = await spec.operation()
        except Exception:
            await _release(spec)
            raise

        match result:
            case Error(e):
                await _release(spec)
                return Refused(e)
            case Ok(value):
                match await spec.store.complete(spec.key, spec.identify(value)):
                    case Error(e):
                        # The value exists; retries see a pending key until it expires
                        logger.error(
                            "Failed to complete idempotency key %s: %s", spec.key, e.message
                        )
                    case Ok(_):
                        pass
                return Executed(value)


# ═══════════════════════════════════════════════════════════════════════════════
# Final Node
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class ResultNode:
    def __init__(self, outcome: Outcome, key: str) -> None:
        self.outcome = outcome
        self.key = key

    @classmethod
    def __compose__(cls, outcome: IdempotencyOutcome, spec: SpecNode) -> "ResultNode":
        return cls(outcome.value, spec.spec.key)

    def to_result(self) -> Result[IdempotentResult[Any], StorefrontError]:
        match self.outcome:
            case Executed(value=v):
                return Ok(IdempotentResult(value=v, replayed=False, key=self.key))
            case Replayed(value=v):
                return Ok(IdempotentResult(value=v, replayed=True, key=self.key))
            case Refused(error=e):
                return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════


async def run_idempotent(
    spec: IdempotencySpec,
) -> Result[IdempotentResult[Any], StorefrontError]:
    """
    Execute ``spec.operation`` at most once per key.

    Unexpected exceptions from the operation release the key and propagate.
    """
    try:
        node = await G.run(ResultNode).inject(spec)
    except StorageError as e:
        return Error(e)
    return node.to_result()


__all__ = (
    "IdempotencySpec",
    "IdempotentResult",
    "Outcome",
    "Executed",
    "Replayed",
    "Refused",
    "SpecNode",
    "FetchRecordNode",
    "IdempotencyOutcome",
    "ResultNode",
    "run_idempotent",
)
