"""Markdown serialization of a ReportDocument."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from email.utils import format_datetime
from pathlib import Path
from typing import List, Sequence

from .models import (
    ConfigurationDiagnostics,
    Diagnostic,
    FileReport,
    ReportDocument,
    SourceItem,
)

logger = logging.getLogger(__name__)

NO_DIAGNOSTICS_TEXT = (
    "No errors or warnings reported by the compiler across the checked feature configurations."
)
NO_FILES_TEXT = (
    "No third-party source was implicated by the diagnostics, so nothing was extracted."
)
NO_ITEMS_TEXT = "_No items intersecting the referenced lines were found in this file._"

_BACKTICK_RUN = re.compile(r"`+")


@dataclass
class MarkdownReportRenderer:
    title: str = "GetDoc Report"

    def render(self, document: ReportDocument) -> str:
        lines: List[str] = []
        lines.append(
            f"# {self.title} - {document.mode.describe()} - {format_datetime(document.generated_at)}"
        )
        lines.append("")
        lines.append(
            "Identical diagnostics are listed once, with every feature configuration "
            "that produced them. Error code explanations are collected in an appendix."
        )
        self._render_configurations(document.configurations, lines)
        self._render_diagnostics(document, lines)
        self._render_files(document.files, lines)
        self._render_explanations(document, lines)
        return "\n".join(lines).rstrip() + "\n"

    def write(self, document: ReportDocument, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(document), encoding="utf-8")
        logger.info(f"Report written to {output_path}")
        return output_path

    # --- Sections ---

    def _render_configurations(self, groups: Sequence[ConfigurationDiagnostics], lines: List[str]) -> None:
        lines += ["", "## Feature Configurations Checked", ""]
        for group in groups:
            configuration = group.configuration
            entry = f"* `{configuration.name}` (`cargo check {configuration.description}`)"
            if group.failure:
                entry += f" - **check failed:** {group.failure}"
            else:
                entry += f" - {len(group.diagnostics)} new diagnostic(s)"
            lines.append(entry)

    def _render_diagnostics(self, document: ReportDocument, lines: List[str]) -> None:
        lines += ["", "## Consolidated Compiler Diagnostics (Errors and Warnings)", ""]
        diagnostics = [d for group in document.configurations for d in group.diagnostics]
        if not diagnostics:
            lines += _fenced(NO_DIAGNOSTICS_TEXT, "text")
            return

        explained = document.explanation_map()
        implicated_by_diagnostic = {}
        for file_report in document.files:
            for diagnostic in file_report.implicated.diagnostics:
                implicated_by_diagnostic.setdefault(diagnostic.identity, []).append(file_report.implicated.path)

        body: List[str] = []
        for diagnostic in diagnostics:
            body.append(f"{_level_prefix(diagnostic)}{diagnostic.rendered}")
            body.append(f"    (Diagnostic primary location: {diagnostic.primary_location})")
            if diagnostic.code and diagnostic.code in explained:
                body.append(f"    (For generic explanation of {diagnostic.code}, see Appendix A)")
            body.append(f"    Occurred under feature set(s): {', '.join(diagnostic.configurations)}")
            paths = implicated_by_diagnostic.get(diagnostic.identity)
            if paths:
                listed = ", ".join(f"`{Path(path).name}`" for path in paths)
                body.append(f"    (Implicates: {listed} - see extracted source below)")
            body.append("")
        lines += _fenced("\n".join(body).rstrip(), "text")

    def _render_files(self, files: Sequence[FileReport], lines: List[str]) -> None:
        lines += ["", "## Extracted Third-Party Source Code", ""]
        if not files:
            lines.append(NO_FILES_TEXT)
            return

        for file_report in files:
            implicated = file_report.implicated
            extraction = file_report.extraction
            lines += ["---", f"### From File: `{implicated.path}`", ""]
            ranges = ", ".join(str(r) for r in implicated.ranges)
            lines += [f"Lines of interest: {ranges}", ""]

            lines.append("**Referenced by:**")
            for diagnostic in implicated.diagnostics:
                code = f" {diagnostic.code}" if diagnostic.code else ""
                lines.append(
                    f"* {diagnostic.severity.value.upper()}{code} (originating at "
                    f"`{diagnostic.primary_location}` from configuration(s): "
                    f"`{', '.join(diagnostic.configurations)}`)"
                )
            lines.append("")

            if extraction.failed:
                lines += [f"_Source could not be extracted: {extraction.error}_", ""]
                continue
            if not extraction.items:
                lines += [NO_ITEMS_TEXT, ""]
                continue
            for item in extraction.items:
                self._render_item(item, lines, level=4)

    def _render_item(self, item: SourceItem, lines: List[str], level: int) -> None:
        lines += [f"{'#' * level} {item.kind.label} `{item.name}`", ""]
        if item.documentation:
            lines += [f"> {doc}".rstrip() for doc in item.documentation]
            lines.append("")
        lines += _fenced(item.signature, "rust")
        lines.append("")
        for child in item.children:
            self._render_item(child, lines, level=level + 1)

    def _render_explanations(self, document: ReportDocument, lines: List[str]) -> None:
        if not document.explanations:
            return
        lines += ["", "## Appendix A: Error Code Explanations", ""]
        for code, text in document.explanations:
            lines += [f"### Explanation for {code}", ""]
            lines += [f"> {line}".rstrip() for line in text.strip().splitlines()]
            lines.append("")


def _level_prefix(diagnostic: Diagnostic) -> str:
    level = diagnostic.severity.value.upper()
    if diagnostic.code:
        return f"{level}: {diagnostic.code}: "
    return f"{level}: "


def _fenced(content: str, language: str) -> List[str]:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    fence = "`" * max(3, longest + 1)
    return [f"{fence}{language}", content, fence]
