"""In-memory stand-ins for the parts of Motor the workflow calls.

Each transaction works on a deep copy of the committed data taken when it
starts; commit swaps the copy in, abort throws it away. That is enough to
observe atomicity and isolation without a replica set.
"""

from collections import defaultdict
from copy import deepcopy
from types import SimpleNamespace

from bson import ObjectId
from pymongo.errors import InvalidOperation


def _matches(doc, query):
    return all(doc.get(k) == v for k, v in (query or {}).items())


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    async def to_list(self, length=None):
        docs = [deepcopy(d) for d in self._docs]
        return docs if length is None else docs[:length]


class FakeCollection:
    def __init__(self, client, name):
        self._client = client
        self.name = name

    def _docs(self, session):
        if session is not None and session.in_transaction:
            return session.staged[self.name]
        return self._client.committed[self.name]

    async def find_one(self, filter=None, session=None):
        for doc in self._docs(session):
            if _matches(doc, filter):
                return deepcopy(doc)
        return None

    def find(self, filter=None, session=None):
        return FakeCursor([d for d in self._docs(session) if _matches(d, filter)])

    async def count_documents(self, filter, session=None):
        return sum(1 for d in self._docs(session) if _matches(d, filter))

    async def insert_one(self, document, session=None):
        self._client.check_write()
        document.setdefault("_id", ObjectId())
        self._docs(session).append(deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, filter, update, session=None):
        self._client.check_write()
        for doc in self._docs(session):
            if _matches(doc, filter):
                doc.update(deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def replace_one(self, filter, replacement, upsert=False, session=None):
        self._client.check_write()
        docs = self._docs(session)
        for i, doc in enumerate(docs):
            if _matches(doc, filter):
                docs[i] = dict(deepcopy(replacement), _id=doc["_id"])
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
        new_id = ObjectId()
        docs.append(dict(deepcopy(filter), **deepcopy(replacement), _id=new_id))
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=new_id)

    async def delete_many(self, filter, session=None):
        docs = self._docs(session)
        kept = [d for d in docs if not _matches(d, filter)]
        deleted = len(docs) - len(kept)
        docs[:] = kept
        return SimpleNamespace(deleted_count=deleted)


class FakeDatabase:
    def __init__(self, client, name):
        self._client = client
        self.name = name

    def get_collection(self, name, codec_options=None):
        return FakeCollection(self._client, name)

    def __getitem__(self, name):
        return self.get_collection(name)


class FakeSession:
    def __init__(self, client, **options):
        self.client = client
        self.options = options
        self.staged = None
        self.transaction_options = None
        self.commits = 0
        self.aborts = 0
        self.ended = False

    @property
    def in_transaction(self):
        return self.staged is not None

    def start_transaction(self, **options):
        if self.in_transaction:
            raise InvalidOperation("Transaction already in progress")
        if self.client.start_transaction_error is not None:
            raise self.client.start_transaction_error
        self.transaction_options = options
        self.staged = defaultdict(list, deepcopy(dict(self.client.committed)))

    async def commit_transaction(self):
        if not self.in_transaction:
            raise InvalidOperation("No transaction started")
        staged, self.staged = self.staged, None
        if self.client.commit_error is not None:
            raise self.client.commit_error
        self.client.committed = staged
        self.commits += 1

    async def abort_transaction(self):
        if not self.in_transaction:
            raise InvalidOperation("No transaction started")
        if self.client.abort_error is not None:
            raise self.client.abort_error
        self.staged = None
        self.aborts += 1

    async def end_session(self):
        if self.in_transaction:
            self.staged = None
        self.ended = True


class FakeAdmin:
    def __init__(self, client):
        self._client = client

    async def command(self, name):
        if self._client.ping_error is not None:
            raise self._client.ping_error
        return {"ok": 1.0}


class FakeMotorClient:
    def __init__(self):
        self.committed = defaultdict(list)
        self.sessions = []
        self.start_transaction_error = None
        self.commit_error = None
        self.abort_error = None
        self.write_error = None
        self.ping_error = None
        self.closed = False
        self.admin = FakeAdmin(self)

    def check_write(self):
        if self.write_error is not None:
            raise self.write_error

    async def start_session(self, **options):
        session = FakeSession(self, **options)
        self.sessions.append(session)
        return session

    def __getitem__(self, name):
        return FakeDatabase(self, name)

    def close(self):
        self.closed = True
