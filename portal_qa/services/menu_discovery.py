"""Discovery of navigable menu entries by name prefix."""

import logging
from typing import List, Set

from portal_qa.models.match import MenuEntry
from portal_qa.services.page_surface import PageSurface

logger = logging.getLogger(__name__)


class MenuDiscovery:
    """Enumerates the anchors inside a menu container."""

    def __init__(self, surface: PageSurface):
        self.surface = surface

    async def discover_entries(self, container_scope: str, prefix: str) -> List[MenuEntry]:
        """
        List entries under `container_scope` whose text starts with `prefix`.

        Matching is case-insensitive on the trimmed text. Entries without a
        destination are skipped and destinations are unique, first one wins.
        Document order is preserved. No match is an empty list.
        """
        elements = await self.surface.query_all(f"{container_scope} a")
        wanted = prefix.strip().casefold()

        entries: List[MenuEntry] = []
        seen: Set[str] = set()
        for element in elements:
            text = await element.text_content()
            label = (text or "").strip()
            if not label.casefold().startswith(wanted):
                continue

            href = await element.get_attribute("href")
            destination = (href or "").strip()
            if not destination:
                logger.debug(f"Skipping '{label}': no destination")
                continue
            if destination in seen:
                continue

            seen.add(destination)
            entries.append(MenuEntry(label=label, destination=destination))

        logger.info(
            f"Discovered {len(entries)} '{prefix}' entries in {container_scope} "
            f"({len(elements)} links scanned)"
        )
        return entries
