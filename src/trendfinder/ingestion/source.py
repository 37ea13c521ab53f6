"""Source descriptors — what to fetch and which strategy to fetch it with."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SourceKind(str, Enum):
    """Closed set of fetch strategies."""

    WEBSITE = "website"
    NEWSLETTER = "newsletter"
    SOCIAL_USER = "social_user"
    SOCIAL_SEARCH = "social_search"


@dataclass(frozen=True)
class SourceDescriptor:
    """One configured content origin.

    ``identifier`` is a URL for website and newsletter sources, a username for
    social_user sources and a search phrase for social_search sources.
    """

    identifier: str
    kind: SourceKind

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.identifier}"
