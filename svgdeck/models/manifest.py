"""Package manifest used while the OOXML archive is assembled."""

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Optional

from pydantic import Field

from ..errors import PackageIntegrityError
from .base import DeckBaseModel

PACKAGE_SOURCE = ""


class Relationship(DeckBaseModel):
    r_id: str
    rel_type: str
    target: str = Field(..., description="Absolute part name without leading slash")


class PackageManifest(DeckBaseModel):
    """Part names, their content types and the relationship edges between them."""

    defaults: Dict[str, str] = Field(default_factory=dict)
    overrides: Dict[str, str] = Field(default_factory=dict)
    relationships: Dict[str, List[Relationship]] = Field(default_factory=dict)

    def add_default(self, extension: str, content_type: str) -> None:
        self.defaults[extension.lower()] = content_type

    def add_part(self, partname: str, content_type: Optional[str] = None) -> None:
        """Register a part; parts covered by an extension default pass no type."""
        if content_type is not None:
            self.overrides[partname] = content_type

    def relate(self, source: str, rel_type: str, target: str) -> str:
        """Add an edge from ``source`` to ``target`` and return its rId."""
        rels = self.relationships.setdefault(source, [])
        r_id = f"rId{len(rels) + 1}"
        rels.append(Relationship(r_id=r_id, rel_type=rel_type, target=target))
        return r_id

    def rels_for(self, source: str) -> List[Relationship]:
        return self.relationships.get(source, [])

    def content_type_of(self, partname: str) -> Optional[str]:
        if partname in self.overrides:
            return self.overrides[partname]
        extension = posixpath.splitext(partname)[1].lstrip(".").lower()
        return self.defaults.get(extension)

    @staticmethod
    def rels_partname(source: str) -> str:
        if source == PACKAGE_SOURCE:
            return "_rels/.rels"
        directory, filename = posixpath.split(source)
        return posixpath.join(directory, "_rels", f"{filename}.rels")

    @staticmethod
    def relative_target(source: str, target: str) -> str:
        if source == PACKAGE_SOURCE:
            return target
        return posixpath.relpath(target, posixpath.dirname(source))

    def verify(self, written: Iterable[str]) -> None:
        """Check cross-references against the part names actually written."""
        written_set = set(written)
        errors: List[str] = []

        for source, rels in self.relationships.items():
            if source != PACKAGE_SOURCE and source not in written_set:
                errors.append(f"Relationships declared for missing part: {source}")
            seen_ids = set()
            for rel in rels:
                if rel.r_id in seen_ids:
                    errors.append(f"Duplicate {rel.r_id} in {self.rels_partname(source)}")
                seen_ids.add(rel.r_id)
                if rel.target not in written_set:
                    errors.append(
                        f"Dangling {rel.r_id} in {self.rels_partname(source)}: {rel.target}"
                    )

        for partname in sorted(written_set):
            if partname.endswith(".rels"):
                continue
            if self.content_type_of(partname) is None:
                errors.append(f"No content type for part: {partname}")
            if partname.startswith("ppt/slides/slide") and partname not in self.overrides:
                errors.append(f"Slide part without override: {partname}")

        if errors:
            raise PackageIntegrityError("; ".join(errors))
