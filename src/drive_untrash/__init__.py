"""drive-untrash — restore explicitly trashed items across a Google Drive folder tree."""

__version__ = "0.1.0"
