"""Vault storage for Task Hub: markdown documents in a directory tree."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


class DocumentError(Exception):
    """Base exception for document access failures."""

    def __init__(self, message: str, document_id: str, cause: Optional[BaseException] = None):
        self.document_id = document_id
        self.cause = cause
        super().__init__(message)


class ReadError(DocumentError):
    """Raised when a document cannot be read."""


class WriteError(DocumentError):
    """Raised when a document cannot be written."""


@dataclass(frozen=True)
class DocumentRef:
    """Reference to a document in the vault.

    ``id`` is the vault-relative POSIX path, which is also the document
    identifier carried by every Task.
    """
    id: str
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


def is_markdown_path(path: Union[str, Path]) -> bool:
    """Check if a path names a markdown document."""
    return Path(path).suffix.lower() == MARKDOWN_SUFFIX


def short_path(document_id: str) -> str:
    """Last two segments of a document id, for compact display."""
    parts = document_id.split("/")
    if len(parts) <= 2:
        return document_id
    return "/".join(parts[-2:])


class VaultStorage:
    """File-based document collection rooted at a vault directory."""

    def __init__(self, vault_dir: Union[str, Path], encoding: str = "utf-8"):
        self.vault_dir = Path(vault_dir).expanduser().resolve()
        self.encoding = encoding

    def ref_for_path(self, path: Union[str, Path]) -> Optional[DocumentRef]:
        """Build a DocumentRef for a path inside the vault.

        Returns:
            DocumentRef, or None if the path is outside the vault or not
            a markdown file
        """
        path = Path(path)
        if not path.is_absolute():
            path = self.vault_dir / path
        path = path.resolve()

        try:
            relative = path.relative_to(self.vault_dir)
        except ValueError:
            return None

        if not is_markdown_path(path):
            return None
        if any(part.startswith(".") for part in relative.parts):
            return None

        return DocumentRef(id=relative.as_posix(), path=path)

    def get_document(self, document_id: str) -> DocumentRef:
        """Look up a document by id."""
        ref = self.ref_for_path(document_id)
        if ref is None:
            raise ReadError(f"Not a vault document: {document_id}", document_id)
        return ref

    def list_documents(self) -> List[DocumentRef]:
        """List all markdown documents, sorted by id.

        Hidden files and directories (``.obsidian``, ``.git``, ...) are
        skipped.
        """
        refs = []
        if not self.vault_dir.is_dir():
            logger.warning(f"Vault directory does not exist: {self.vault_dir}")
            return refs

        for root, dirs, files in os.walk(self.vault_dir):
            dirs[:] = [d for d in dirs if not d.startswith(".")]
            for filename in files:
                if filename.startswith(".") or not is_markdown_path(filename):
                    continue
                path = Path(root) / filename
                relative = path.relative_to(self.vault_dir)
                refs.append(DocumentRef(id=relative.as_posix(), path=path))

        refs.sort(key=lambda ref: ref.id)
        return refs

    def read_document(self, ref: DocumentRef) -> str:
        """Read a document's text.

        Raises:
            ReadError: If the file is missing or cannot be decoded
        """
        try:
            # newline="" keeps \r\n so line rewrites can preserve it
            with open(ref.path, "r", encoding=self.encoding, newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(f"Error reading {ref.id}: {e}", ref.id, e) from e

    def write_document(self, ref: DocumentRef, text: str) -> None:
        """Replace a document's text atomically.

        The new content is written to a temporary file in the same
        directory and moved over the original, so readers never observe a
        partial write.

        Raises:
            WriteError: If the document cannot be written
        """
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{ref.path.name}.", suffix=".tmp", dir=str(ref.path.parent)
            )
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(text)
            if ref.path.exists():
                os.chmod(tmp_name, ref.path.stat().st_mode & 0o777)
            os.replace(tmp_name, ref.path)
            tmp_name = None
        except OSError as e:
            raise WriteError(f"Error writing {ref.id}: {e}", ref.id, e) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Wrote {ref.id}")
