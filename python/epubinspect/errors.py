"""EPUB inspection error definitions.

All domain errors are defined here with their corresponding error codes.
Only EntryNotFoundError, EntryUnreadableError and PackageParseError ever
reach a host caller. MalformedReferenceError is recovered wherever a
reference is resolved.
"""

from enum import Enum


class EpubErrorCode(str, Enum):
    """Standardized error codes for EPUB inspection.

    Format: E_CATEGORY_NAME
    """

    # Archive errors
    E_ENTRY_NOT_FOUND = "E_ENTRY_NOT_FOUND"
    E_ENTRY_UNREADABLE = "E_ENTRY_UNREADABLE"

    # Package errors (fatal for the whole extraction)
    E_PACKAGE_PARSE_FAILED = "E_PACKAGE_PARSE_FAILED"

    # Reference errors (recovered per item)
    E_MALFORMED_REFERENCE = "E_MALFORMED_REFERENCE"


class EpubError(Exception):
    """Base exception for EPUB inspection errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
    """

    def __init__(self, code: EpubErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class EntryNotFoundError(EpubError):
    """A referenced archive entry is absent."""

    def __init__(self, entry_name: str, message: str | None = None):
        self.entry_name = entry_name
        super().__init__(
            EpubErrorCode.E_ENTRY_NOT_FOUND,
            message or f"Archive entry not found: {entry_name}",
        )


class EntryUnreadableError(EpubError):
    """An archive entry exists but its data is corrupt or undecodable."""

    def __init__(self, entry_name: str, message: str | None = None):
        self.entry_name = entry_name
        super().__init__(
            EpubErrorCode.E_ENTRY_UNREADABLE,
            message or f"Archive entry unreadable: {entry_name}",
        )


class PackageParseError(EpubError):
    """The root package document cannot be located or parsed."""

    def __init__(self, message: str = "Failed to parse package document"):
        super().__init__(EpubErrorCode.E_PACKAGE_PARSE_FAILED, message)


class MalformedReferenceError(EpubError):
    """An href that cannot be resolved to a plausible archive path."""

    def __init__(self, href: str | None, message: str | None = None):
        self.href = href
        super().__init__(
            EpubErrorCode.E_MALFORMED_REFERENCE,
            message or f"Malformed reference: {href!r}",
        )
