"""Data models for Google Drive listing results."""

from dataclasses import dataclass, field

# Drive API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_MIME_TYPE = "mimeType"
FIELD_EXPLICITLY_TRASHED = "explicitlyTrashed"
FIELD_FILES = "files"
FIELD_NEXT_PAGE_TOKEN = "nextPageToken"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# Empty id marks the whole store rather than one folder.
STORE_ROOT_ID = ""


@dataclass(frozen=True)
class FolderScope:
    """A traversal unit: one folder, or the whole store when id is empty."""

    id: str = STORE_ROOT_ID
    name: str = "root"

    @property
    def is_store_root(self) -> bool:
        return self.id == STORE_ROOT_ID


STORE_ROOT = FolderScope()


@dataclass(frozen=True)
class RemoteItem:
    """Represents a single file or folder returned by a listing call."""

    id: str
    name: str
    mime_type: str
    explicitly_trashed: bool

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    def as_scope(self) -> FolderScope:
        return FolderScope(id=self.id, name=self.name)


@dataclass(frozen=True)
class Page:
    """One page of a listing plus the token for the next one (None on the last page)."""

    items: list[RemoteItem] = field(default_factory=list)
    next_token: str | None = None

    @property
    def is_last(self) -> bool:
        return not self.next_token
