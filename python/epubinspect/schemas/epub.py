"""EPUB manifest Pydantic schemas.

Contains the output models handed to the host application. All models are
frozen: they are derived fresh on every extraction and never mutated.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MediaSubType(str, Enum):
    """Role of a resource inside the package."""

    PAGE = "page"  # referenced by the spine
    ASSET = "asset"  # manifest-only


class MediaFile(BaseModel):
    """A resolved content resource.

    `file_size` is the uncompressed size, or None when the archive does not
    know it.
    """

    file_name: str
    media_type: str
    sub_type: MediaSubType
    file_size: int | None = None

    model_config = ConfigDict(frozen=True)


class EpubTocEntry(BaseModel):
    """Node of a table of contents, landmarks or page-list tree.

    `href` is None for label-only headings and for links that did not
    resolve to an archive entry.
    """

    title: str
    href: str | None = None
    children: list["EpubTocEntry"] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class R2Location(BaseModel):
    progression: float
    position: int
    total_progression: float | None = None

    model_config = ConfigDict(frozen=True)


class R2Locator(BaseModel):
    """Synthetic reading position."""

    href: str
    type: str
    locations: R2Location

    model_config = ConfigDict(frozen=True)


class TypedBytes(BaseModel):
    """Raw entry bytes with their declared media type."""

    content: bytes
    media_type: str

    model_config = ConfigDict(frozen=True)


class EpubManifest(BaseModel):
    """Everything a reader needs to navigate an EPUB."""

    resources: list[MediaFile]
    toc: list[EpubTocEntry] = Field(default_factory=list)
    landmarks: list[EpubTocEntry] = Field(default_factory=list)
    page_list: list[EpubTocEntry] = Field(default_factory=list)
    page_count: int = 0
    is_fixed_layout: bool = False
    positions: list[R2Locator] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
