"""Pydantic schemas for inspector output."""

from epubinspect.schemas.epub import (
    EpubManifest,
    EpubTocEntry,
    MediaFile,
    MediaSubType,
    R2Location,
    R2Locator,
    TypedBytes,
)

__all__ = [
    "EpubManifest",
    "EpubTocEntry",
    "MediaFile",
    "MediaSubType",
    "R2Location",
    "R2Locator",
    "TypedBytes",
]
