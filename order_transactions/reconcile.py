"""Reconcile a desired document against whatever the collection already holds.

Two strategies share one interface so the workflow can pick, per record
type, between an explicit read-then-branch and a single upserting replace.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

INSERTED = "inserted"
UPDATED = "updated"

Document = Dict[str, Any]
Mutation = Callable[[Mapping[str, Any]], Mapping[str, Any]]


@dataclass(frozen=True)
class Reconciliation:
    action: str
    document_id: Any = None
    before: Optional[Document] = None
    after: Optional[Document] = None

    @property
    def inserted(self) -> bool:
        return self.action == INSERTED


class Strategy(ABC):
    @abstractmethod
    async def reconcile(
        self, collection, key: Mapping[str, Any], desired: Mapping[str, Any], session
    ) -> Reconciliation:
        ...


class FindThenWrite(Strategy):
    """Look up ``key``; insert ``desired`` if missing, else ``$set`` what ``mutate`` returns."""

    def __init__(self, mutate: Mutation) -> None:
        self.mutate = mutate

    async def reconcile(self, collection, key, desired, session) -> Reconciliation:
        existing = await collection.find_one(dict(key), session=session)
        if existing is None:
            doc = dict(desired)
            doc.pop("_id", None)
            result = await collection.insert_one(doc, session=session)
            doc["_id"] = result.inserted_id
            return Reconciliation(INSERTED, result.inserted_id, None, doc)

        changes = dict(self.mutate(existing))
        changes.pop("_id", None)
        selector = {"_id": existing["_id"]}
        if changes:
            await collection.update_one(selector, {"$set": changes}, session=session)
        after = await collection.find_one(selector, session=session)
        return Reconciliation(UPDATED, existing["_id"], existing, after)


class AtomicUpsert(Strategy):
    """Replace the match for ``key`` with ``desired``, inserting when none exists."""

    async def reconcile(self, collection, key, desired, session) -> Reconciliation:
        replacement = dict(desired)
        replacement.pop("_id", None)
        result = await collection.replace_one(
            dict(key), replacement, upsert=True, session=session
        )
        if result.upserted_id is not None:
            return Reconciliation(INSERTED, result.upserted_id, None, replacement)
        return Reconciliation(UPDATED, None, None, replacement)
