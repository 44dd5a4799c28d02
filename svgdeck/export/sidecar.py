"""Package backend that delegates rendering to an external process.

The process reads one JSON request on stdin and answers with an empty body
or a JSON object; an ``error`` key means failure.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from pydantic import ValidationError

from ..errors import BackendUnavailableError, DelegateProtocolError
from ..models.config import ExportConfig
from ..models.delegate import DelegateConfig, DelegateRequest, DelegateResponse, DelegateSlide
from ..models.slide import Slide

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("node", "sidecars/pptxgen/index.js")
DEFAULT_TIMEOUT = 120.0
PROBE_TIMEOUT = 10.0

_SCRIPT_SUFFIXES = (".js", ".mjs", ".cjs", ".py")


def _text(stream: Union[str, bytes, None]) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def _diagnostics(stdout: Union[str, bytes, None], stderr: Union[str, bytes, None]) -> str:
    return f"stdout: {_text(stdout)}\nstderr: {_text(stderr)}"


def _looks_like_path(arg: str) -> bool:
    if arg.startswith("-"):
        return False
    return "/" in arg or "\\" in arg or arg.lower().endswith(_SCRIPT_SUFFIXES)


class SidecarBackend:
    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        timeout: float = DEFAULT_TIMEOUT,
        cwd: Optional[Union[str, Path]] = None,
    ) -> None:
        if not command:
            raise ValueError("Sidecar command must not be empty")
        self.command = tuple(command)
        self.timeout = timeout
        self.cwd = Path(cwd) if cwd is not None else None

    def name(self) -> str:
        return "pptxgen"

    def _argv(self) -> Optional[List[str]]:
        executable = shutil.which(self.command[0])
        if executable is None:
            return None
        return [executable, *self.command[1:]]

    def _script_paths(self) -> List[Path]:
        base = self.cwd or Path.cwd()
        paths = []
        for arg in self.command[1:]:
            if _looks_like_path(arg):
                path = Path(arg)
                paths.append(path if path.is_absolute() else base / path)
        return paths

    def is_available(self) -> bool:
        argv = self._argv()
        if argv is None:
            logger.debug("Sidecar executable not found: %s", self.command[0])
            return False
        missing = [p for p in self._script_paths() if not p.is_file()]
        if missing:
            logger.debug("Sidecar script not found: %s", missing[0])
            return False
        try:
            probe = subprocess.run(
                [argv[0], "--version"],
                capture_output=True,
                timeout=PROBE_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("Sidecar probe failed: %s", exc)
            return False
        return probe.returncode == 0

    def build_request(
        self, slides: Sequence[Slide], output_path: Union[str, Path], config: ExportConfig
    ) -> DelegateRequest:
        return DelegateRequest(
            slides=[DelegateSlide.from_slide(slide) for slide in slides],
            output=str(output_path),
            config=DelegateConfig.from_config(config),
        )

    def export(
        self,
        slides: Sequence[Slide],
        output_path: Union[str, Path],
        config: ExportConfig,
    ) -> None:
        argv = self._argv()
        if argv is None:
            raise BackendUnavailableError(f"Sidecar executable not found: {self.command[0]}")

        request = self.build_request(slides, output_path, config)
        payload = json.dumps(request.to_dict(), ensure_ascii=False)

        try:
            completed = subprocess.run(
                argv,
                input=payload,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                cwd=str(self.cwd) if self.cwd is not None else None,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise DelegateProtocolError(
                f"Sidecar timed out after {self.timeout:g}s",
                _diagnostics(exc.stdout, exc.stderr),
            ) from exc
        except OSError as exc:
            raise DelegateProtocolError(f"Failed to launch sidecar: {exc}") from exc

        diagnostics = _diagnostics(completed.stdout, completed.stderr)
        if completed.returncode != 0:
            raise DelegateProtocolError(
                f"Sidecar exited with code {completed.returncode}", diagnostics
            )

        body = completed.stdout.strip()
        if not body:
            return
        try:
            response = DelegateResponse.model_validate_json(body)
        except ValidationError as exc:
            raise DelegateProtocolError(
                f"Malformed sidecar response: {exc.errors()[0]['msg']}", diagnostics
            ) from exc
        if response.error is not None:
            raise DelegateProtocolError(f"Sidecar reported an error: {response.error}", diagnostics)
