"""
Runs ``cargo check`` for one feature configuration and decodes its JSON messages.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .errors import CheckRunError
from .models import FeatureConfiguration, RawDiagnostic, Span

logger = logging.getLogger(__name__)

COMPILER_MESSAGE_REASON = "compiler-message"


class CargoCheckRunner:
    def __init__(
        self,
        project_root: Path,
        cargo_command: str = "cargo",
        extra_args: Sequence[str] = (),
    ):
        self.project_root = Path(project_root)
        self.cargo_command = cargo_command
        self.extra_args = list(extra_args)

    def command_for(self, configuration: FeatureConfiguration) -> List[str]:
        return [
            self.cargo_command,
            "check",
            "--message-format=json",
            *configuration.check_args,
            *self.extra_args,
        ]

    def run(self, configuration: FeatureConfiguration) -> List[RawDiagnostic]:
        command = self.command_for(configuration)
        logger.info(f"Running `{' '.join(command)}`")
        try:
            completed = subprocess.run(
                command,
                cwd=self.project_root,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise CheckRunError(
                f"Could not run {self.cargo_command}: {e}",
                configuration=configuration.name,
            ) from e

        diagnostics = parse_check_output(completed.stdout or "")
        stderr = completed.stderr or ""
        if not diagnostics and "error:" in stderr:
            # cargo itself failed (bad flag, broken manifest) before rustc ran
            logger.warning(f"cargo stderr for '{configuration.name}':\n{stderr.strip()}")
            if completed.returncode != 0:
                raise CheckRunError(
                    f"cargo failed before compiling ({_first_error_line(stderr)})",
                    configuration=configuration.name,
                    returncode=completed.returncode,
                )
        logger.debug(
            f"cargo exited with {completed.returncode} for '{configuration.name}', "
            f"{len(diagnostics)} compiler message(s)"
        )
        return diagnostics


def parse_check_output(stdout: str) -> List[RawDiagnostic]:
    """Decode the compiler messages in cargo's JSON-lines output.

    Lines that are not JSON objects, or are not compiler messages, are skipped.
    """
    diagnostics: List[RawDiagnostic] = []
    for line in stdout.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            logger.debug(f"Skipping malformed cargo output line: {line[:80]}")
            continue
        if not isinstance(payload, dict) or payload.get("reason") != COMPILER_MESSAGE_REASON:
            continue
        message = payload.get("message")
        if isinstance(message, dict):
            diagnostics.append(_decode_message(message))
    return diagnostics


def _first_error_line(stderr: str) -> str:
    for line in stderr.splitlines():
        if "error:" in line:
            return line.strip()
    return stderr.strip()


def _decode_message(data: Dict[str, Any]) -> RawDiagnostic:
    code_info = data.get("code") or {}
    return RawDiagnostic(
        level=str(data.get("level", "")),
        message=str(data.get("message", "")),
        code=code_info.get("code") if isinstance(code_info, dict) else None,
        code_explanation=code_info.get("explanation") if isinstance(code_info, dict) else None,
        spans=tuple(span for span in (_decode_span(s) for s in data.get("spans") or []) if span),
        rendered=data.get("rendered"),
        children=tuple(_decode_message(child) for child in data.get("children") or [] if isinstance(child, dict)),
    )


def _decode_span(data: Any) -> Optional[Span]:
    if not isinstance(data, dict) or not data.get("file_name"):
        return None
    line_start = int(data.get("line_start") or 0)
    line_end = int(data.get("line_end") or line_start)
    return Span(
        file_path=str(data["file_name"]),
        line_start=line_start,
        line_end=max(line_start, line_end),
        is_primary=bool(data.get("is_primary", False)),
        label=data.get("label"),
    )
