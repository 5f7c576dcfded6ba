"""Upload payloads accepted from clients.

A form value is classified once, at the HTTP boundary, as either a
``FileUpload`` or a ``PastedText``. Everything downstream matches on the
variant instead of inspecting the object again.
"""

from dataclasses import dataclass
from typing import Final

from server.apps.entries.infrastructure.identifiers import normalize_filename

DEFAULT_CONTENT_TYPE: Final = 'application/octet-stream'
TEXT_CONTENT_TYPE: Final = 'text/plain'


@dataclass(frozen=True, slots=True)
class FileUpload:
    """A file submitted with its own name and type."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        """Size in bytes."""
        return len(self.data)


@dataclass(frozen=True, slots=True)
class PastedText:
    """Plain text pasted instead of a file, stored as a .txt entry."""

    text: str

    @property
    def size(self) -> int:
        """Size in bytes once UTF-8 encoded."""
        return len(self.text.encode())


UploadPayload = FileUpload | PastedText


@dataclass(frozen=True, slots=True)
class MaterializedPayload:
    """What gets written for a payload: a named, typed blob."""

    entry_id: str
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        """Size in bytes."""
        return len(self.data)


def materialize(
    payload: UploadPayload,
    entry_id: str,
    prefix: str = '',
) -> MaterializedPayload:
    """Resolve the stored name, type and bytes of a payload.

    Args:
        payload: File or pasted text.
        entry_id: Id the entry will be stored under.
        prefix: Prefix for generated names (e.g. 'guest-').

    Returns:
        Materialized payload ready to be stored.
    """
    match payload:
        case FileUpload(filename=filename, content_type=content_type, data=data):
            return MaterializedPayload(
                entry_id=entry_id,
                filename=normalize_filename(
                    filename,
                    fallback=f'{prefix}file-{entry_id}',
                ),
                content_type=content_type or DEFAULT_CONTENT_TYPE,
                data=data,
            )
        case PastedText(text=text):
            return MaterializedPayload(
                entry_id=entry_id,
                filename=f'{prefix}paste-{entry_id}.txt',
                content_type=TEXT_CONTENT_TYPE,
                data=text.encode(),
            )
