"""Report composition."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Mapping, Optional, Sequence

from .errors import AssemblyError
from .models import (
    ConfigurationDiagnostics,
    FileExtraction,
    FileReport,
    ImplicatedFile,
    ModeDescriptor,
    ReportDocument,
)

logger = logging.getLogger(__name__)


@dataclass
class ReportAssembler:
    def assemble(
        self,
        mode: ModeDescriptor,
        configurations: Sequence[ConfigurationDiagnostics],
        implicated: Mapping[str, ImplicatedFile],
        extractions: Mapping[str, FileExtraction],
        timestamp: datetime,
        explanations: Optional[Dict[str, str]] = None,
    ) -> ReportDocument:
        missing = [path for path in implicated if path not in extractions]
        if missing:
            raise AssemblyError(
                f"No extraction result for {len(missing)} implicated file(s): {', '.join(missing)}",
                missing=missing,
            )

        files = tuple(
            FileReport(implicated=entry, extraction=extractions[path])
            for path, entry in implicated.items()
        )
        unreferenced = set(extractions) - set(implicated)
        if unreferenced:
            logger.debug(f"Ignoring {len(unreferenced)} extraction(s) for files no diagnostic implicates")

        return ReportDocument(
            generated_at=timestamp,
            mode=mode,
            configurations=tuple(configurations),
            files=files,
            explanations=tuple(sorted((explanations or {}).items())),
        )
