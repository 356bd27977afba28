"""Business categories derived from an uploaded object path."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Reserved output directory segment; anything below it is pipeline output.
HLS_DIRNAME = "hls"


class Category(str, Enum):
    BACKGROUND = "background"
    PRODUCT = "product"
    SECTION = "section"
    ABOUT_PAGE = "aboutPage"
    UNRECOGNIZED = "unrecognized"
    IGNORED = "ignored"


_RECOGNIZED = {Category.BACKGROUND, Category.PRODUCT, Category.SECTION, Category.ABOUT_PAGE}


@dataclass(frozen=True)
class ClassificationResult:
    category: Category
    site_key: str = ""
    entity_id: str | None = None
    reason: str = ""

    @classmethod
    def ignore(cls, reason: str) -> "ClassificationResult":
        return cls(category=Category.IGNORED, reason=reason)

    @property
    def ignored(self) -> bool:
        return self.category == Category.IGNORED

    @property
    def recognized(self) -> bool:
        """True when the path identifies a business record that can be reconciled."""
        return self.category in _RECOGNIZED

    @property
    def destination_prefix(self) -> str | None:
        site = self.site_key
        match self.category:
            case Category.BACKGROUND:
                return f"videos/public/{site}/{HLS_DIRNAME}"
            case Category.PRODUCT:
                return f"products/public/{site}/{HLS_DIRNAME}/{self.entity_id}"
            case Category.SECTION:
                return f"videos/public/{site}/sections/{HLS_DIRNAME}/{self.entity_id}"
            case Category.ABOUT_PAGE:
                return f"sitePages/{site}/about/{HLS_DIRNAME}"
            case _:
                return None
