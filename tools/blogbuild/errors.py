from __future__ import annotations

from typing import Optional


class BuildError(Exception):
    """Anything that should stop a static build."""


class ConfigError(BuildError):
    pass


class ContentSourceError(BuildError):
    """The content store could not be queried or answered with an error."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        error_id: Optional[str] = None,
    ):
        self.status = status
        self.error_id = error_id
        detail = ", ".join(
            part for part in (
                f"status={status}" if status is not None else "",
                f"id={error_id}" if error_id else "",
            ) if part
        )
        super().__init__(f"{message} ({detail})" if detail else message)


class EntryNotFoundError(BuildError):
    def __init__(self, content_type: str, slug: str):
        self.content_type = content_type
        self.slug = slug
        super().__init__(f"no {content_type} entry with slug {slug!r}")


class DuplicateSlugError(BuildError):
    def __init__(self, slug: str, entry_ids):
        self.slug = slug
        self.entry_ids = list(entry_ids)
        super().__init__(
            f"slug {slug!r} is used by {len(self.entry_ids)} entries: "
            + ", ".join(self.entry_ids)
        )


class InvalidEntryError(BuildError):
    pass
