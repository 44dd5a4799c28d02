"""Package backends: the built-in OOXML writer and the external delegate."""

from .base import PackageBackend
from .native import NativeOoxmlBackend, write_package
from .sidecar import SidecarBackend

__all__ = ["NativeOoxmlBackend", "PackageBackend", "SidecarBackend", "write_package"]
