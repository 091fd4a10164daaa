"""
Document store abstraction for pins: in-memory, SQLAlchemy and Firestore.

Every client stores the pin body without its identifier and hands the
identifier back separately, the same way a document database does.
"""

from __future__ import annotations

import copy
import time
import uuid
from typing import Any, Dict, Optional, Protocol

from firebase_admin import firestore
from sqlalchemy import JSON, Column, Float, String, Text, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from pinboard.firebase import get_firebase_app
from shared.constants import DEFAULT_BOARD, DEFAULT_PIN_SIZE, PINS_COLLECTION


class DbClient(Protocol):
    """Interface for the pins document collection."""

    def insert_pin(self, data: dict) -> str:
        ...

    def patch_pin(self, pin_id: str, patch: dict) -> bool:
        ...

    def get_pin(self, pin_id: str) -> Optional[dict]:
        ...

    def list_pins(self) -> list[tuple[str, dict]]:
        ...

    def delete_pin(self, pin_id: str) -> bool:
        ...


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.pins: Dict[str, dict] = {}

    def insert_pin(self, data: dict) -> str:
        pin_id = uuid.uuid4().hex
        self.pins[pin_id] = copy.deepcopy(data)
        return pin_id

    def patch_pin(self, pin_id: str, patch: dict) -> bool:
        doc = self.pins.get(pin_id)
        if doc is None:
            return False
        doc.update(copy.deepcopy(patch))
        return True

    def get_pin(self, pin_id: str) -> Optional[dict]:
        doc = self.pins.get(pin_id)
        return copy.deepcopy(doc) if doc is not None else None

    def list_pins(self) -> list[tuple[str, dict]]:
        return [(pin_id, copy.deepcopy(doc)) for pin_id, doc in self.pins.items()]

    def delete_pin(self, pin_id: str) -> bool:
        return self.pins.pop(pin_id, None) is not None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.pins.clear()


Base = declarative_base()


class PinRow(Base):
    __tablename__ = "pins"

    id = Column(String, primary_key=True)
    author = Column(String, nullable=False, default="")
    board = Column(String, nullable=False, default=DEFAULT_BOARD)
    title = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    destination = Column(Text, nullable=False, default="")
    img_url = Column(Text, nullable=False, default="")
    pin_size = Column(String, nullable=False, default=DEFAULT_PIN_SIZE)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(Float, nullable=False, index=True)


_PIN_COLUMNS = (
    "author",
    "board",
    "title",
    "description",
    "destination",
    "img_url",
    "pin_size",
    "tags",
)


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_document(row: PinRow) -> dict:
        return {name: getattr(row, name) for name in _PIN_COLUMNS}

    def insert_pin(self, data: dict) -> str:
        pin_id = uuid.uuid4().hex
        values = {k: v for k, v in data.items() if k in _PIN_COLUMNS}
        with self.Session() as session:
            session.add(PinRow(id=pin_id, created_at=time.time(), **values))
            session.commit()
        return pin_id

    def patch_pin(self, pin_id: str, patch: dict) -> bool:
        with self.Session() as session:
            row = session.get(PinRow, pin_id)
            if not row:
                return False
            for key, value in patch.items():
                if key in _PIN_COLUMNS:
                    setattr(row, key, value)
            session.commit()
            return True

    def get_pin(self, pin_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(PinRow, pin_id)
            return self._to_document(row) if row else None

    def list_pins(self) -> list[tuple[str, dict]]:
        with self.Session() as session:
            rows = session.execute(
                select(PinRow).order_by(PinRow.created_at.asc())
            ).scalars()
            return [(row.id, self._to_document(row)) for row in rows]

    def delete_pin(self, pin_id: str) -> bool:
        with self.Session() as session:
            row = session.get(PinRow, pin_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True


class FirestoreDbClient:
    """Pins stored as documents of a Firestore collection with auto-assigned ids."""

    def __init__(
        self,
        collection: str = PINS_COLLECTION,
        *,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        client: Any = None,
    ):
        if client is None:
            app = get_firebase_app(credentials_path, project_id)
            client = firestore.client(app)
        self._collection = client.collection(collection)

    def insert_pin(self, data: dict) -> str:
        _, ref = self._collection.add(data)
        return ref.id

    def patch_pin(self, pin_id: str, patch: dict) -> bool:
        ref = self._collection.document(pin_id)
        if not ref.get().exists:
            return False
        ref.update(patch)
        return True

    def get_pin(self, pin_id: str) -> Optional[dict]:
        snapshot = self._collection.document(pin_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def list_pins(self) -> list[tuple[str, dict]]:
        return [(doc.id, doc.to_dict() or {}) for doc in self._collection.stream()]

    def delete_pin(self, pin_id: str) -> bool:
        ref = self._collection.document(pin_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True
