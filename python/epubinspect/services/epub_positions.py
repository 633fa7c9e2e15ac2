"""Synthetic reading positions.

Fixed layout: one locator per page, progression 0.
Reflowable: max(1, ceil(size / bytes_per_position)) locators per page with
progression i / count.

Positions are 1-indexed and package-global. Total progression is filled in
by a second pass as position / len(locators), so the first locator reports
1/n and the last reports exactly 1.0.
"""

from __future__ import annotations

import math

from epubinspect.schemas.epub import MediaFile, MediaSubType, R2Location, R2Locator

DEFAULT_BYTES_PER_POSITION = 1024


def compute_positions(
    resources: list[MediaFile],
    is_fixed_layout: bool,
    bytes_per_position: int = DEFAULT_BYTES_PER_POSITION,
) -> list[R2Locator]:
    """Build the locator sequence over the reading order.

    Args:
        resources: Classified resources; only pages are used.
        is_fixed_layout: Whether the package is pre-paginated.
        bytes_per_position: Uncompressed bytes per reflowable position.

    Raises:
        ValueError: If a reflowable page has no known size.
    """
    reading_order = [r for r in resources if r.sub_type is MediaSubType.PAGE]

    locators: list[R2Locator] = []
    position = 1
    for page in reading_order:
        if is_fixed_layout:
            count = 1
        else:
            if page.file_size is None:
                raise ValueError(f"Reflowable page without size: {page.file_name}")
            count = max(1, math.ceil(page.file_size / bytes_per_position))

        for p in range(count):
            locators.append(
                R2Locator(
                    href=page.file_name,
                    type=page.media_type,
                    locations=R2Location(progression=p / count, position=position),
                )
            )
            position += 1

    total = len(locators)
    return [
        locator.model_copy(
            update={
                "locations": locator.locations.model_copy(
                    update={"total_progression": locator.locations.position / total}
                )
            }
        )
        for locator in locators
    ]
