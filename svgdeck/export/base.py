"""Backend contract shared by every package writer."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence, Union, runtime_checkable

from ..models.config import ExportConfig
from ..models.slide import Slide


@runtime_checkable
class PackageBackend(Protocol):
    """Writes one presentation package from an ordered slide sequence.

    ``export`` returns ``None`` on success and raises an ``ExportError``
    subclass on failure. Callers check ``is_available`` before exporting.
    """

    def name(self) -> str:
        ...

    def is_available(self) -> bool:
        ...

    def export(
        self,
        slides: Sequence[Slide],
        output_path: Union[str, Path],
        config: ExportConfig,
    ) -> None:
        ...
