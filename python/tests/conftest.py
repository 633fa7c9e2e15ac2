"""Pytest configuration and fixtures for inspector tests.

Test isolation strategy:
- Settings cache is cleared around every test so monkeypatched env vars apply
- Extraction logging context is reset after every test
- EPUB archives are built in memory by tests.helpers
"""

import sys
from collections.abc import Generator
from pathlib import Path

# Add python/ to sys.path for importing epubinspect and tests.helpers
_python_root = Path(__file__).parent.parent
if str(_python_root) not in sys.path:
    sys.path.insert(0, str(_python_root))

import pytest

from epubinspect.config import clear_settings_cache
from epubinspect.logging import clear_extraction_context


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop EPUB_* overrides from the ambient environment."""
    for name in (
        "EPUB_ENV",
        "EPUB_BYTES_PER_PAGE",
        "EPUB_BYTES_PER_POSITION",
        "EPUB_LOG_JSON",
        "EPUB_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    clear_extraction_context()


@pytest.fixture
def epub_file(tmp_path: Path):
    """Factory writing EPUB bytes to a temporary .epub file."""

    def _write(data: bytes, name: str = "book.epub") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def log_sink():
    """Configure structlog to capture events into a list.

    Extraction context is applied before capture so tests can assert on
    archive_path/operation. structlog is restored after the test.
    """
    import structlog

    from epubinspect.logging import add_extraction_context

    events: list[dict] = []
    original_config = structlog.get_config()

    def capture_processor(logger, method_name, event_dict):
        event_dict["log_level"] = method_name
        events.append(event_dict.copy())
        raise structlog.DropEvent

    structlog.configure(
        processors=[add_extraction_context, capture_processor],
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    yield events

    structlog.configure(**original_config)
