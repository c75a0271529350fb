"""Pagination signing key provisioning."""

from clair.pagination.keys import FernetKeyCodec, KeyCodec, ensure_pagination_key

__all__ = ["FernetKeyCodec", "KeyCodec", "ensure_pagination_key"]
