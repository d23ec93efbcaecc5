"""
Idempotency — run an operation at most once per client key.

    from storefront import idempotency as I

    spec = I.IdempotencySpec(
        key=request_key,
        operation=lambda: create_order(draft),
        identify=lambda order: order.id,
        replay=orders.get,
        store=I.MemoryIdempotencyStore(),
        input_hash=I.fingerprint({"email": email, "lines": lines}),
    )

    match await I.run_idempotent(spec):
        case Ok(r): r.value, r.replayed
        case Error(IdempotencyConflictError()): ...   # still running
        case Error(IdempotencyMismatchError()): ...   # key reused
"""

from storefront.idempotency._types import (
    RecordState,
    IdempotencyRecord,
    fingerprint,
)
from storefront.idempotency._store import (
    IdempotencyStore,
    MemoryIdempotencyStore,
)
from storefront.idempotency._sqlalchemy import SQLAlchemyIdempotencyStore
from storefront.idempotency._graph import (
    IdempotencySpec,
    IdempotentResult,
    IdempotencyOutcome,
    run_idempotent,
)

__all__ = (
    "RecordState",
    "IdempotencyRecord",
    "fingerprint",
    "IdempotencyStore",
    "MemoryIdempotencyStore",
    "SQLAlchemyIdempotencyStore",
    "IdempotencySpec",
    "IdempotentResult",
    "IdempotencyOutcome",
    "run_idempotent",
)
