"""Operator-triggered publishing of provider resources into host-owned paths.

INVARIANT: Nothing is copied at declaration time. ``publish(tag)`` copies
files (or whole directory trees), creating parent directories, and leaves
existing destination files alone unless ``force`` is set.

Two tags may name the same destination. That is allowed but logged; the
tag published last wins.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from pathlib import Path

from horizon.result import ServiceResult

logger = logging.getLogger(__name__)


class Publisher:
    def __init__(self) -> None:
        self._groups: dict[str, dict[Path, Path]] = {}

    def declare(self, tag: str, paths: Mapping[str | Path, str | Path]) -> None:
        group = self._groups.setdefault(tag, {})
        for source, destination in paths.items():
            dest = Path(destination)
            for other_tag, other in self._groups.items():
                if other_tag != tag and dest in other.values():
                    logger.warning(
                        "Publish destination %s is shared by tags %r and %r",
                        dest,
                        other_tag,
                        tag,
                    )
            group[Path(source)] = dest

    def tags(self) -> list[str]:
        return sorted(self._groups)

    def paths(self, tag: str) -> dict[Path, Path]:
        return dict(self._groups.get(tag, {}))

    def publish(self, tag: str, *, force: bool = False) -> ServiceResult:
        op = "publish"
        group = self._groups.get(tag)
        if group is None:
            return ServiceResult.failure(
                op, "TAG_NOT_FOUND", f"No publishable resources for tag [{tag}]", tag=tag
            )

        missing = [str(source) for source in group if not source.exists()]
        if missing:
            return ServiceResult.failure(
                op, "SOURCE_MISSING", f"Missing source paths for tag [{tag}]", missing=missing
            )

        copied: list[str] = []
        skipped: list[str] = []
        for source, destination in group.items():
            if source.is_dir():
                for file in sorted(p for p in source.rglob("*") if p.is_file()):
                    target = destination / file.relative_to(source)
                    _copy(file, target, force=force, copied=copied, skipped=skipped)
            else:
                _copy(source, destination, force=force, copied=copied, skipped=skipped)

        logger.debug("Published %r: %d copied, %d skipped", tag, len(copied), len(skipped))
        warnings = [f"{path} exists (use --force to overwrite)" for path in skipped]
        return ServiceResult(
            ok=True,
            op=op,
            data={"tag": tag, "copied": copied, "skipped": skipped},
            warnings=warnings,
        )


def _copy(
    source: Path,
    destination: Path,
    *,
    force: bool,
    copied: list[str],
    skipped: list[str],
) -> None:
    if destination.exists() and not force:
        skipped.append(str(destination))
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
    copied.append(str(destination))
