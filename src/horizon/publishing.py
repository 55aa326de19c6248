"""Publishable resource declarations.

Declaring is bookkeeping only; files are copied when an operator asks the
host publisher for a tag (``horizon publish --tag ...`` or ``horizon assets``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from horizon.contracts import AssetPublisher

ASSETS_TAG = "horizon-assets"
CONFIG_TAG = "horizon-config"


@dataclass(frozen=True)
class PublishGroup:
    tag: str
    paths: tuple[tuple[str, str], ...]

    def as_mapping(self) -> dict[str, str]:
        return dict(self.paths)


class ResourcePublisher:
    def __init__(self, publisher: AssetPublisher) -> None:
        self._publisher = publisher
        self._groups: list[PublishGroup] = []

    @property
    def groups(self) -> list[PublishGroup]:
        return list(self._groups)

    def declare_publishable(self, tag: str, paths: Mapping[str | Path, str | Path]) -> PublishGroup:
        group = PublishGroup(tag, tuple((str(src), str(dest)) for src, dest in paths.items()))
        self._publisher.declare(tag, group.as_mapping())
        self._groups.append(group)
        return group

    def declare_assets(self, public_source: Path, public_path: Path) -> PublishGroup:
        destination = public_path / "vendor" / "horizon"
        return self.declare_publishable(ASSETS_TAG, {public_source: destination})

    def declare_config(self, config_source: Path, config_path: Path) -> PublishGroup:
        return self.declare_publishable(CONFIG_TAG, {config_source: config_path / "horizon.toml"})
