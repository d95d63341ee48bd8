"""
Document store abstraction for Firestore and an in-memory test implementation.

Every record lives under users/{uid}/<collection>/<id>. Services work against
a per-user view (UserStore); multi-document mutations go through
DocumentStore.run_transaction so the day assignment protocol commits or fails
as a unit.
"""

from __future__ import annotations

import copy
import functools
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterator, List, Optional, Protocol, TypeVar

from firebase_admin import firestore
from google.api_core import exceptions
from google.cloud.firestore_v1 import (
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    Query,
)
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from shared.firebase_constants import (
    DAY_ASSIGNMENTS_COLLECTION,
    EXERCISE_NAMES_COLLECTION,
    FITNESS_LOGS_COLLECTION,
    LABELS_COLLECTION,
    MAX_BATCH_WRITES,
    SCAN_PAGE_SIZE,
    USERS_COLLECTION,
)
from shared.json_utils import convert_keys
from shared.types import (
    DayAssignment,
    ExerciseLog,
    ExerciseName,
    Label,
    from_document,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _locked(method):
    """Runs an InMemoryUserStore method under its store's lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.store._lock:
            return method(self, *args, **kwargs)

    return wrapper


class UserStore(Protocol):
    """Operations on one user's partition of the store."""

    user_id: str

    # Labels
    def get_label(self, label_id: str) -> Optional[Label]:
        ...

    def list_labels(self) -> List[Label]:
        ...

    def create_label(self, fields: dict) -> str:
        ...

    def update_label(self, label_id: str, fields: dict) -> None:
        ...

    def delete_label(self, label_id: str) -> None:
        ...

    def add_label_date(self, label_id: str, date: str) -> None:
        ...

    def remove_label_date(self, label_id: str, date: str) -> None:
        ...

    # Day assignments
    def find_assignment(self, date: str) -> Optional[DayAssignment]:
        ...

    def list_assignments_between(self, start: str, end: str) -> List[DayAssignment]:
        ...

    def list_assignments_for_label(self, label_id: str) -> List[DayAssignment]:
        ...

    def create_assignment(self, date: str, label_id: str) -> DayAssignment:
        ...

    def update_assignment_label(self, assignment_id: str, label_id: str) -> None:
        ...

    def delete_assignment(self, assignment_id: str) -> None:
        ...

    # Exercise logs
    def create_log(self, fields: dict) -> str:
        ...

    def get_log(self, log_id: str) -> Optional[ExerciseLog]:
        ...

    def list_logs_on(self, date: str) -> List[ExerciseLog]:
        ...

    def list_logs_between(self, start: str, end: str) -> List[ExerciseLog]:
        ...

    def latest_log_for_activity(self, activity: str) -> Optional[ExerciseLog]:
        ...

    def update_log(self, log_id: str, fields: dict) -> None:
        ...

    def delete_log(self, log_id: str) -> None:
        ...

    # Exercise name index
    def find_exercise_name(self, name: str) -> Optional[ExerciseName]:
        ...

    def list_exercise_names(self) -> List[ExerciseName]:
        ...

    def create_exercise_name(self, name: str) -> str:
        ...

    def delete_exercise_names(self, name: str) -> List[str]:
        ...


class DocumentStore(Protocol):
    """Interface for the backing document database."""

    def for_user(self, user_id: str) -> UserStore:
        ...

    def run_transaction(self, user_id: str, fn: Callable[[UserStore], T]) -> T:
        ...

    def scan_exercise_logs(self, page_size: int = SCAN_PAGE_SIZE) -> Iterator["StoredLog"]:
        ...

    def batch_writer(self, max_writes: int = MAX_BATCH_WRITES) -> "BatchWriter":
        ...


@dataclass
class StoredLog:
    """Raw exercise log document found by a cross-user scan."""

    user_id: str
    log_id: str
    data: dict


@dataclass
class PendingWrite:
    kind: str  # "merge" or "delete"
    user_id: str
    collection: str
    doc_id: str
    fields: Optional[dict] = None


class BatchWriter:
    """
    Queues writes and commits them in batches of at most `max_writes`.

    Batches are committed one after another, never concurrently. Use as a
    context manager to flush the remainder on exit.
    """

    def __init__(
        self,
        commit: Callable[[List[PendingWrite]], None],
        max_writes: int = MAX_BATCH_WRITES,
    ):
        if max_writes < 1:
            raise ValueError("max_writes must be positive")
        self._commit = commit
        self.max_writes = max_writes
        self.pending: List[PendingWrite] = []
        self.commits = 0
        self.written = 0

    def merge(self, user_id: str, collection: str, doc_id: str, fields: dict) -> None:
        self._queue(PendingWrite("merge", user_id, collection, doc_id, fields))

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        self._queue(PendingWrite("delete", user_id, collection, doc_id))

    def _queue(self, write: PendingWrite) -> None:
        self.pending.append(write)
        if len(self.pending) >= self.max_writes:
            self.flush()

    def flush(self) -> None:
        if not self.pending:
            return
        logger.info("Committing a batch of %d writes", len(self.pending))
        self._commit(list(self.pending))
        self.commits += 1
        self.written += len(self.pending)
        self.pending.clear()

    def __enter__(self) -> "BatchWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


@dataclass
class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    collections: Dict[tuple, Dict[str, dict]] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.RLock()
        self._last_timestamp: Optional[datetime] = None

    def now(self) -> datetime:
        """Strictly increasing UTC timestamps so createdAt ordering is stable."""
        with self._lock:
            current = datetime.now(timezone.utc)
            if self._last_timestamp and current <= self._last_timestamp:
                current = self._last_timestamp + timedelta(microseconds=1)
            self._last_timestamp = current
            return current

    def docs(self, user_id: str, collection: str) -> Dict[str, dict]:
        with self._lock:
            return self.collections.setdefault((user_id, collection), {})

    def for_user(self, user_id: str) -> "InMemoryUserStore":
        return InMemoryUserStore(store=self, user_id=user_id)

    def run_transaction(self, user_id: str, fn: Callable[[UserStore], T]) -> T:
        """
        Runs `fn` holding the store lock; on error, restores only `user_id`'s
        collections so writes to other users are kept.
        """
        with self._lock:
            snapshot = {
                key: copy.deepcopy(docs)
                for key, docs in self.collections.items()
                if key[0] == user_id
            }
            try:
                return fn(self.for_user(user_id))
            except Exception:
                for key in [key for key in self.collections if key[0] == user_id]:
                    del self.collections[key]
                self.collections.update(snapshot)
                raise

    def scan_exercise_logs(self, page_size: int = SCAN_PAGE_SIZE) -> Iterator[StoredLog]:
        with self._lock:
            keys = sorted(
                (user_id, doc_id)
                for (user_id, collection), docs in self.collections.items()
                if collection == FITNESS_LOGS_COLLECTION
                for doc_id in docs
            )
        for user_id, doc_id in keys:
            with self._lock:
                data = copy.deepcopy(self.docs(user_id, FITNESS_LOGS_COLLECTION).get(doc_id))
            if data is not None:
                yield StoredLog(user_id=user_id, log_id=doc_id, data=data)

    def batch_writer(self, max_writes: int = MAX_BATCH_WRITES) -> BatchWriter:
        return BatchWriter(self._commit_writes, max_writes=max_writes)

    def _commit_writes(self, writes: List[PendingWrite]) -> None:
        with self._lock:
            for write in writes:
                docs = self.docs(write.user_id, write.collection)
                if write.kind == "delete":
                    docs.pop(write.doc_id, None)
                else:
                    docs.setdefault(write.doc_id, {}).update(copy.deepcopy(write.fields))

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.collections.clear()


@dataclass
class InMemoryUserStore:
    store: InMemoryDocumentStore
    user_id: str

    def _docs(self, collection: str) -> Dict[str, dict]:
        return self.store.docs(self.user_id, collection)

    def _require(self, collection: str, doc_id: str) -> dict:
        doc = self._docs(collection).get(doc_id)
        if doc is None:
            raise exceptions.NotFound(
                f"No document to update: {USERS_COLLECTION}/{self.user_id}/{collection}/{doc_id}"
            )
        return doc

    def _insert(self, collection: str, body: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        body = dict(body)
        body["createdAt"] = self.store.now()
        self._docs(collection)[doc_id] = body
        return doc_id

    def _records(self, data_class, collection: str, predicate=None) -> list:
        return [
            from_document(data_class, doc_id, copy.deepcopy(data))
            for doc_id, data in self._docs(collection).items()
            if predicate is None or predicate(data)
        ]

    # Labels

    @_locked
    def get_label(self, label_id: str) -> Optional[Label]:
        data = self._docs(LABELS_COLLECTION).get(label_id)
        if data is None:
            return None
        return from_document(Label, label_id, copy.deepcopy(data))

    @_locked
    def list_labels(self) -> List[Label]:
        labels = self._records(Label, LABELS_COLLECTION)
        return sorted(labels, key=lambda label: label.created_at, reverse=True)

    @_locked
    def create_label(self, fields: dict) -> str:
        body = convert_keys(fields, "snake_to_camel")
        body["dates"] = []
        return self._insert(LABELS_COLLECTION, body)

    @_locked
    def update_label(self, label_id: str, fields: dict) -> None:
        doc = self._require(LABELS_COLLECTION, label_id)
        doc.update(convert_keys(copy.deepcopy(fields), "snake_to_camel"))
        doc["updatedAt"] = self.store.now()

    @_locked
    def delete_label(self, label_id: str) -> None:
        self._docs(LABELS_COLLECTION).pop(label_id, None)

    @_locked
    def add_label_date(self, label_id: str, date: str) -> None:
        doc = self._require(LABELS_COLLECTION, label_id)
        dates = doc.setdefault("dates", [])
        if date not in dates:
            dates.append(date)

    @_locked
    def remove_label_date(self, label_id: str, date: str) -> None:
        doc = self._require(LABELS_COLLECTION, label_id)
        doc["dates"] = [d for d in doc.get("dates", []) if d != date]

    # Day assignments

    @_locked
    def find_assignment(self, date: str) -> Optional[DayAssignment]:
        for doc_id, data in self._docs(DAY_ASSIGNMENTS_COLLECTION).items():
            if data.get("date") == date:
                return from_document(DayAssignment, doc_id, copy.deepcopy(data))
        return None

    @_locked
    def list_assignments_between(self, start: str, end: str) -> List[DayAssignment]:
        assignments = self._records(
            DayAssignment,
            DAY_ASSIGNMENTS_COLLECTION,
            lambda data: start <= data.get("date", "") <= end,
        )
        return sorted(assignments, key=lambda a: a.date)

    @_locked
    def list_assignments_for_label(self, label_id: str) -> List[DayAssignment]:
        return self._records(
            DayAssignment,
            DAY_ASSIGNMENTS_COLLECTION,
            lambda data: data.get("labelId", data.get("emojiId")) == label_id,
        )

    @_locked
    def create_assignment(self, date: str, label_id: str) -> DayAssignment:
        doc_id = self._insert(
            DAY_ASSIGNMENTS_COLLECTION, {"date": date, "labelId": label_id}
        )
        return from_document(
            DayAssignment, doc_id, self._docs(DAY_ASSIGNMENTS_COLLECTION)[doc_id]
        )

    @_locked
    def update_assignment_label(self, assignment_id: str, label_id: str) -> None:
        doc = self._require(DAY_ASSIGNMENTS_COLLECTION, assignment_id)
        doc["labelId"] = label_id
        doc["updatedAt"] = self.store.now()

    @_locked
    def delete_assignment(self, assignment_id: str) -> None:
        self._docs(DAY_ASSIGNMENTS_COLLECTION).pop(assignment_id, None)

    # Exercise logs

    @_locked
    def create_log(self, fields: dict) -> str:
        return self._insert(
            FITNESS_LOGS_COLLECTION, convert_keys(copy.deepcopy(fields), "snake_to_camel")
        )

    @_locked
    def get_log(self, log_id: str) -> Optional[ExerciseLog]:
        data = self._docs(FITNESS_LOGS_COLLECTION).get(log_id)
        if data is None:
            return None
        return from_document(ExerciseLog, log_id, copy.deepcopy(data))

    @_locked
    def list_logs_on(self, date: str) -> List[ExerciseLog]:
        return self._records(
            ExerciseLog, FITNESS_LOGS_COLLECTION, lambda data: data.get("date") == date
        )

    @_locked
    def list_logs_between(self, start: str, end: str) -> List[ExerciseLog]:
        return self._records(
            ExerciseLog,
            FITNESS_LOGS_COLLECTION,
            lambda data: start <= data.get("date", "") <= end,
        )

    @_locked
    def latest_log_for_activity(self, activity: str) -> Optional[ExerciseLog]:
        logs = self._records(
            ExerciseLog,
            FITNESS_LOGS_COLLECTION,
            lambda data: data.get("activity") == activity,
        )
        if not logs:
            return None
        return max(logs, key=lambda log: log.created_at)

    @_locked
    def update_log(self, log_id: str, fields: dict) -> None:
        doc = self._require(FITNESS_LOGS_COLLECTION, log_id)
        doc.update(convert_keys(copy.deepcopy(fields), "snake_to_camel"))

    @_locked
    def delete_log(self, log_id: str) -> None:
        self._docs(FITNESS_LOGS_COLLECTION).pop(log_id, None)

    # Exercise name index

    @_locked
    def find_exercise_name(self, name: str) -> Optional[ExerciseName]:
        for doc_id, data in self._docs(EXERCISE_NAMES_COLLECTION).items():
            if data.get("name") == name:
                return from_document(ExerciseName, doc_id, copy.deepcopy(data))
        return None

    @_locked
    def list_exercise_names(self) -> List[ExerciseName]:
        return self._records(ExerciseName, EXERCISE_NAMES_COLLECTION)

    @_locked
    def create_exercise_name(self, name: str) -> str:
        return self._insert(EXERCISE_NAMES_COLLECTION, {"name": name})

    @_locked
    def delete_exercise_names(self, name: str) -> List[str]:
        docs = self._docs(EXERCISE_NAMES_COLLECTION)
        matching = [doc_id for doc_id, data in docs.items() if data.get("name") == name]
        for doc_id in matching:
            del docs[doc_id]
        return matching


# ---------------------------------------------------------------------------
# Firestore implementation
# ---------------------------------------------------------------------------


class FirestoreDocumentStore:
    """
    Firestore-backed implementation built on a firebase-admin client.

    The client is passed in rather than looked up globally, so one process
    can hold stores for different Firebase apps (or a mocked client in tests).
    """

    def __init__(self, client):
        self.client = client

    def for_user(self, user_id: str) -> "FirestoreUserStore":
        return FirestoreUserStore(self.client, user_id)

    def run_transaction(self, user_id: str, fn: Callable[[UserStore], T]) -> T:
        """
        Runs `fn` in a Firestore transaction, retried automatically on contention.

        Firestore requires every read in a transaction to happen before the
        first write; callers must order their operations accordingly.
        """

        @firestore.transactional
        def _run(transaction):
            return fn(FirestoreUserStore(self.client, user_id, transaction=transaction))

        return _run(self.client.transaction())

    def _user_collection(self, user_id: str, collection: str):
        return (
            self.client.collection(USERS_COLLECTION)
            .document(user_id)
            .collection(collection)
        )

    def scan_exercise_logs(self, page_size: int = SCAN_PAGE_SIZE) -> Iterator[StoredLog]:
        """Pages through every user's logs with a collection group query."""
        last_snapshot = None
        while True:
            query = (
                self.client.collection_group(FITNESS_LOGS_COLLECTION)
                .order_by(FieldPath.document_id())
                .limit(page_size)
            )
            if last_snapshot is not None:
                query = query.start_after(last_snapshot)
            snapshots = list(query.get())
            if not snapshots:
                return
            for snapshot in snapshots:
                last_snapshot = snapshot
                parent = snapshot.reference.parent.parent
                yield StoredLog(
                    user_id=parent.id if parent is not None else "",
                    log_id=snapshot.id,
                    data=snapshot.to_dict() or {},
                )
            if len(snapshots) < page_size:
                return

    def batch_writer(self, max_writes: int = MAX_BATCH_WRITES) -> BatchWriter:
        return BatchWriter(self._commit_writes, max_writes=max_writes)

    def _commit_writes(self, writes: List[PendingWrite]) -> None:
        batch = self.client.batch()
        for write in writes:
            ref = self._user_collection(write.user_id, write.collection).document(
                write.doc_id
            )
            if write.kind == "delete":
                batch.delete(ref)
            else:
                batch.set(ref, write.fields, merge=True)
        batch.commit()


class FirestoreUserStore:
    def __init__(self, client, user_id: str, transaction=None):
        self.client = client
        self.user_id = user_id
        self.transaction = transaction

    def _collection(self, name: str):
        return (
            self.client.collection(USERS_COLLECTION)
            .document(self.user_id)
            .collection(name)
        )

    # Reads and writes are routed through the transaction when there is one.

    def _get(self, ref):
        return ref.get(transaction=self.transaction)

    def _query(self, query) -> list:
        return list(query.get(transaction=self.transaction))

    def _set(self, ref, data: dict) -> None:
        if self.transaction is not None:
            self.transaction.set(ref, data)
        else:
            ref.set(data)

    def _update(self, ref, data: dict) -> None:
        if self.transaction is not None:
            self.transaction.update(ref, data)
        else:
            ref.update(data)

    def _delete(self, ref) -> None:
        if self.transaction is not None:
            self.transaction.delete(ref)
        else:
            ref.delete()

    def _load(self, data_class, collection: str, doc_id: str):
        snapshot = self._get(self._collection(collection).document(doc_id))
        if not snapshot.exists:
            return None
        return from_document(data_class, snapshot.id, snapshot.to_dict())

    def _load_all(self, data_class, query) -> list:
        return [
            from_document(data_class, snapshot.id, snapshot.to_dict())
            for snapshot in self._query(query)
        ]

    def _insert(self, collection: str, body: dict) -> str:
        ref = self._collection(collection).document()
        self._set(ref, {**body, "createdAt": SERVER_TIMESTAMP})
        return ref.id

    # Labels

    def get_label(self, label_id: str) -> Optional[Label]:
        return self._load(Label, LABELS_COLLECTION, label_id)

    def list_labels(self) -> List[Label]:
        query = self._collection(LABELS_COLLECTION).order_by(
            "createdAt", direction=Query.DESCENDING
        )
        return self._load_all(Label, query)

    def create_label(self, fields: dict) -> str:
        body = convert_keys(fields, "snake_to_camel")
        body["dates"] = []
        return self._insert(LABELS_COLLECTION, body)

    def update_label(self, label_id: str, fields: dict) -> None:
        body = convert_keys(fields, "snake_to_camel")
        body["updatedAt"] = SERVER_TIMESTAMP
        self._update(self._collection(LABELS_COLLECTION).document(label_id), body)

    def delete_label(self, label_id: str) -> None:
        self._delete(self._collection(LABELS_COLLECTION).document(label_id))

    def add_label_date(self, label_id: str, date: str) -> None:
        self._update(
            self._collection(LABELS_COLLECTION).document(label_id),
            {"dates": ArrayUnion([date])},
        )

    def remove_label_date(self, label_id: str, date: str) -> None:
        self._update(
            self._collection(LABELS_COLLECTION).document(label_id),
            {"dates": ArrayRemove([date])},
        )

    # Day assignments

    def find_assignment(self, date: str) -> Optional[DayAssignment]:
        query = (
            self._collection(DAY_ASSIGNMENTS_COLLECTION)
            .where(filter=FieldFilter("date", "==", date))
            .limit(1)
        )
        found = self._load_all(DayAssignment, query)
        return found[0] if found else None

    def list_assignments_between(self, start: str, end: str) -> List[DayAssignment]:
        query = (
            self._collection(DAY_ASSIGNMENTS_COLLECTION)
            .where(filter=FieldFilter("date", ">=", start))
            .where(filter=FieldFilter("date", "<=", end))
            .order_by("date")
        )
        return self._load_all(DayAssignment, query)

    def list_assignments_for_label(self, label_id: str) -> List[DayAssignment]:
        found: Dict[str, DayAssignment] = {}
        for field_name in ("labelId", "emojiId"):
            query = self._collection(DAY_ASSIGNMENTS_COLLECTION).where(
                filter=FieldFilter(field_name, "==", label_id)
            )
            for assignment in self._load_all(DayAssignment, query):
                if assignment.label_id == label_id:
                    found.setdefault(assignment.id, assignment)
        return list(found.values())

    def create_assignment(self, date: str, label_id: str) -> DayAssignment:
        assignment_id = self._insert(
            DAY_ASSIGNMENTS_COLLECTION, {"date": date, "labelId": label_id}
        )
        return DayAssignment(id=assignment_id, date=date, label_id=label_id)

    def update_assignment_label(self, assignment_id: str, label_id: str) -> None:
        self._update(
            self._collection(DAY_ASSIGNMENTS_COLLECTION).document(assignment_id),
            {"labelId": label_id, "updatedAt": SERVER_TIMESTAMP},
        )

    def delete_assignment(self, assignment_id: str) -> None:
        self._delete(self._collection(DAY_ASSIGNMENTS_COLLECTION).document(assignment_id))

    # Exercise logs

    def create_log(self, fields: dict) -> str:
        return self._insert(FITNESS_LOGS_COLLECTION, convert_keys(fields, "snake_to_camel"))

    def get_log(self, log_id: str) -> Optional[ExerciseLog]:
        return self._load(ExerciseLog, FITNESS_LOGS_COLLECTION, log_id)

    def list_logs_on(self, date: str) -> List[ExerciseLog]:
        query = self._collection(FITNESS_LOGS_COLLECTION).where(
            filter=FieldFilter("date", "==", date)
        )
        return self._load_all(ExerciseLog, query)

    def list_logs_between(self, start: str, end: str) -> List[ExerciseLog]:
        query = (
            self._collection(FITNESS_LOGS_COLLECTION)
            .where(filter=FieldFilter("date", ">=", start))
            .where(filter=FieldFilter("date", "<=", end))
        )
        return self._load_all(ExerciseLog, query)

    def latest_log_for_activity(self, activity: str) -> Optional[ExerciseLog]:
        query = (
            self._collection(FITNESS_LOGS_COLLECTION)
            .where(filter=FieldFilter("activity", "==", activity))
            .order_by("createdAt", direction=Query.DESCENDING)
            .limit(1)
        )
        found = self._load_all(ExerciseLog, query)
        return found[0] if found else None

    def update_log(self, log_id: str, fields: dict) -> None:
        self._update(
            self._collection(FITNESS_LOGS_COLLECTION).document(log_id),
            convert_keys(fields, "snake_to_camel"),
        )

    def delete_log(self, log_id: str) -> None:
        self._delete(self._collection(FITNESS_LOGS_COLLECTION).document(log_id))

    # Exercise name index

    def find_exercise_name(self, name: str) -> Optional[ExerciseName]:
        query = (
            self._collection(EXERCISE_NAMES_COLLECTION)
            .where(filter=FieldFilter("name", "==", name))
            .limit(1)
        )
        found = self._load_all(ExerciseName, query)
        return found[0] if found else None

    def list_exercise_names(self) -> List[ExerciseName]:
        return self._load_all(ExerciseName, self._collection(EXERCISE_NAMES_COLLECTION))

    def create_exercise_name(self, name: str) -> str:
        return self._insert(EXERCISE_NAMES_COLLECTION, {"name": name})

    def delete_exercise_names(self, name: str) -> List[str]:
        query = self._collection(EXERCISE_NAMES_COLLECTION).where(
            filter=FieldFilter("name", "==", name)
        )
        snapshots = self._query(query)
        if not snapshots:
            return []
        batch = self.client.batch()
        for snapshot in snapshots:
            batch.delete(snapshot.reference)
        batch.commit()
        return [snapshot.id for snapshot in snapshots]
