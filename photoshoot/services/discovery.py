import logging
from typing import List

from photoshoot.models.collage import BackfillReport
from photoshoot.services.collage import COLLAGE_ORIENTATIONS, CollageService

logger = logging.getLogger(__name__)


class CollageDiscovery:
    """Finds session folders without collages and generates them."""

    def __init__(self, collage_service: CollageService):
        self.collage_service = collage_service

    @property
    def store(self):
        return self.collage_service.store

    def folders_with_images(self) -> List[str]:
        """Every folder below the storage root holding at least one source image, at any depth."""
        root = self.store.root
        if not root.is_dir():
            return []

        folders = []
        for directory in sorted((p for p in root.rglob("*") if p.is_dir()), key=lambda p: p.as_posix()):
            if self.collage_service.find_source_images(directory):
                folders.append(self.store.relative_path(directory))
        return folders

    def missing_collage(self, folder: str) -> bool:
        return not any(self.collage_service.collage_exists(folder, o) for o in COLLAGE_ORIENTATIONS)

    def run_backfill_sweep(self) -> BackfillReport:
        """Generate collages for every folder that has none. Never raises."""
        report = BackfillReport()
        try:
            folders = self.folders_with_images()
        except OSError:
            logger.exception("Could not scan %s for missing collages", self.store.root)
            return report

        report.scanned = len(folders)
        for folder in folders:
            # Earlier folders in the sweep may already have produced this one's collages
            if not self.missing_collage(folder):
                continue
            try:
                self.collage_service.compose(folder)
            except Exception:
                logger.exception("Failed to generate collage for %s", folder)
                report.failed.append(folder)
            else:
                report.generated.append(folder)

        logger.info(
            "Missing collages check completed: %d scanned, %d generated, %d failed",
            report.scanned, len(report.generated), len(report.failed),
        )
        return report
