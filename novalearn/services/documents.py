import logging
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from novalearn.core import config

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def store(self, content: bytes) -> str: ...

    def delete(self, reference: str) -> None: ...


class LocalDocumentStore:
    """Keeps documents as flat files under ``root``; references are file names."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path_for(self, reference: str) -> Path:
        name = Path(reference).name
        if not name or name != reference:
            raise ValueError(f'Invalid document reference: {reference!r}')
        return self.root / name

    def store(self, content: bytes) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        reference = uuid.uuid4().hex
        self._path_for(reference).write_bytes(content)
        return reference

    def delete(self, reference: str) -> None:
        self._path_for(reference).unlink(missing_ok=True)


def discard_documents(store: DocumentStore, references: Iterable[str]) -> None:
    for reference in references:
        try:
            store.delete(reference)
        except (OSError, ValueError):
            logger.exception('Could not delete document %s', reference)


_default_store: DocumentStore = LocalDocumentStore(config.DOCUMENT_ROOT)


def get_document_store() -> DocumentStore:
    return _default_store
