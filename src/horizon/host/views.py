"""Namespaced template lookup (``"horizon::layout"``)."""

from __future__ import annotations

from pathlib import Path

EXTENSIONS = (".html", ".jinja", ".txt")


class ViewFinder:
    def __init__(self) -> None:
        self._hints: dict[str, list[Path]] = {}

    def add_namespace(self, namespace: str, path: str | Path) -> None:
        self._hints.setdefault(namespace, []).append(Path(path))

    def namespaces(self) -> dict[str, list[Path]]:
        return {name: list(paths) for name, paths in self._hints.items()}

    def find(self, name: str) -> Path:
        """Resolve ``namespace::dotted.name`` to a template file.

        Raises:
            LookupError: Unknown namespace or no matching file.
        """
        namespace, sep, view = name.partition("::")
        if not sep or namespace not in self._hints:
            raise LookupError(f"No hint path defined for [{namespace}]")
        relative = Path(*view.split("."))
        for base in self._hints[namespace]:
            for ext in EXTENSIONS:
                candidate = base / relative.with_suffix(ext)
                if candidate.is_file():
                    return candidate
        raise LookupError(f"View [{name}] not found")
