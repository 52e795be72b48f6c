"""Storage of saved receipts, groups and preferences.

Documents are JSON files, one per record, grouped per user:

    data/users/<user_id>/
    ├── receipts/      - <id>.json: bill + roster + createdAt
    ├── groups/        - <id>.json: name + roster + createdAt
    └── preferences.json
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from billbeam.domain.bill import Bill, Person, new_id
from billbeam.runtime.logging import get_logger
from billbeam.runtime.paths import ProjectPaths, get_paths, is_safe_id

logger = get_logger(__name__)

T = TypeVar("T")


class StorageError(RuntimeError):
    """Raised when a document cannot be read, written or found."""


class DocumentNotFound(StorageError):
    """Raised when a receipt or group id does not exist."""


class InvalidUserId(StorageError):
    """Raised when a user id cannot be used as a storage key."""


@dataclass(frozen=True)
class SavedReceipt:
    id: str
    bill: Bill
    people: list[Person]
    created_at: datetime
    user_id: str


@dataclass(frozen=True)
class SavedGroup:
    id: str
    name: str
    people: list[Person]
    created_at: datetime
    user_id: str


@dataclass(frozen=True)
class UserPreferences:
    default_group_id: str | None = None


def default_receipt_title(now: datetime) -> str:
    return f"Receipt {now.date().isoformat()}"


class JsonDocumentStore:
    """File-backed store for one user's documents."""

    def __init__(self, user_id: str, paths: ProjectPaths | None = None) -> None:
        if not is_safe_id(user_id):
            raise InvalidUserId(f"Invalid user id: {user_id!r}")
        self.user_id = user_id
        self._paths = paths or get_paths()

    # --- low level ---
    def _read(self, path: Path) -> dict[str, Any]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise DocumentNotFound(f"Document not found: {path.stem}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read %s: %s", path, exc)
            raise StorageError(f"Failed to read document {path.stem}") from exc

    def _write(self, path: Path, document: dict[str, Any]) -> None:
        try:
            self._paths.ensure_user_directories(self.user_id)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            raise StorageError(f"Failed to write document {path.stem}") from exc

    def _delete(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise DocumentNotFound(f"Document not found: {path.stem}") from exc
        except OSError as exc:
            logger.error("Failed to delete %s: %s", path, exc)
            raise StorageError(f"Failed to delete document {path.stem}") from exc

    def _load_all(self, directory: Path, build: Callable[[str, dict[str, Any]], T]) -> list[T]:
        """Load every document in a directory, skipping ones that cannot be read."""
        documents: list[T] = []
        for path in sorted(directory.glob("*.json")):
            try:
                documents.append(build(path.stem, self._read(path)))
            except StorageError as exc:
                logger.warning("Skipping unreadable document %s: %s", path.name, exc)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed document %s: %s", path.name, exc)
        return documents

    def _document_path(self, directory: Path, doc_id: str) -> Path:
        if not is_safe_id(doc_id):
            raise DocumentNotFound(f"Document not found: {doc_id}")
        return directory / f"{doc_id}.json"

    # --- receipts ---
    def _receipt_path(self, receipt_id: str) -> Path:
        return self._document_path(self._paths.user_receipts(self.user_id), receipt_id)

    def _receipt_document(self, bill: Bill, people: Sequence[Person], created_at: str) -> dict[str, Any]:
        receipt = bill.to_dict()
        if not receipt.get("title"):
            receipt["title"] = default_receipt_title(datetime.fromisoformat(created_at))
        return {
            "receipt": receipt,
            "people": [person.to_dict() for person in people],
            "createdAt": created_at,
        }

    def save_receipt(self, bill: Bill, people: Sequence[Person]) -> str:
        receipt_id = new_id()
        created_at = datetime.now(timezone.utc).isoformat()
        self._write(self._receipt_path(receipt_id), self._receipt_document(bill, people, created_at))
        logger.info("Saved receipt %s for user %s", receipt_id, self.user_id)
        return receipt_id

    def update_receipt(self, receipt_id: str, bill: Bill, people: Sequence[Person]) -> None:
        path = self._receipt_path(receipt_id)
        existing = self._read(path)
        created_at = existing.get("createdAt") or datetime.now(timezone.utc).isoformat()
        self._write(path, self._receipt_document(bill, people, created_at))
        logger.info("Updated receipt %s for user %s", receipt_id, self.user_id)

    def _to_saved_receipt(self, receipt_id: str, document: dict[str, Any]) -> SavedReceipt:
        return SavedReceipt(
            id=receipt_id,
            bill=Bill.from_dict(document.get("receipt", {})),
            people=[Person.from_dict(p) for p in document.get("people", [])],
            created_at=datetime.fromisoformat(document["createdAt"]),
            user_id=self.user_id,
        )

    def get_receipt(self, receipt_id: str) -> SavedReceipt:
        return self._to_saved_receipt(receipt_id, self._read(self._receipt_path(receipt_id)))

    def list_receipts(self) -> list[SavedReceipt]:
        directory = self._paths.user_receipts(self.user_id)
        if not directory.exists():
            return []
        receipts = self._load_all(directory, self._to_saved_receipt)
        return sorted(receipts, key=lambda r: r.created_at, reverse=True)

    def delete_receipt(self, receipt_id: str) -> None:
        self._delete(self._receipt_path(receipt_id))
        logger.info("Deleted receipt %s for user %s", receipt_id, self.user_id)

    # --- groups ---
    def _group_path(self, group_id: str) -> Path:
        return self._document_path(self._paths.user_groups(self.user_id), group_id)

    def _to_saved_group(self, group_id: str, document: dict[str, Any]) -> SavedGroup:
        return SavedGroup(
            id=group_id,
            name=str(document.get("name", "")),
            people=[Person.from_dict(p) for p in document.get("people", [])],
            created_at=datetime.fromisoformat(document["createdAt"]),
            user_id=self.user_id,
        )

    def create_group(self, name: str, people: Sequence[Person]) -> str:
        group_id = new_id()
        document = {
            "name": name,
            "people": [person.to_dict() for person in people],
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self._write(self._group_path(group_id), document)
        logger.info("Created group %s (%s) for user %s", group_id, name, self.user_id)
        return group_id

    def update_group(self, group_id: str, name: str | None = None, people: Sequence[Person] | None = None) -> None:
        path = self._group_path(group_id)
        document = self._read(path)
        if name is not None:
            document["name"] = name
        if people is not None:
            document["people"] = [person.to_dict() for person in people]
        self._write(path, document)

    def get_group(self, group_id: str) -> SavedGroup:
        return self._to_saved_group(group_id, self._read(self._group_path(group_id)))

    def list_groups(self) -> list[SavedGroup]:
        directory = self._paths.user_groups(self.user_id)
        if not directory.exists():
            return []
        groups = self._load_all(directory, self._to_saved_group)
        return sorted(groups, key=lambda g: g.created_at, reverse=True)

    def delete_group(self, group_id: str) -> None:
        self._delete(self._group_path(group_id))
        if self.get_preferences().default_group_id == group_id:
            self.set_default_group(None)
        logger.info("Deleted group %s for user %s", group_id, self.user_id)

    # --- preferences ---
    def get_preferences(self) -> UserPreferences:
        path = self._paths.user_preferences(self.user_id)
        if not path.exists():
            return UserPreferences()
        document = self._read(path)
        return UserPreferences(default_group_id=document.get("defaultGroupId"))

    def set_default_group(self, group_id: str | None) -> None:
        if group_id is not None:
            # Raises DocumentNotFound for unknown groups
            self.get_group(group_id)
        self._write(self._paths.user_preferences(self.user_id), {"defaultGroupId": group_id})
