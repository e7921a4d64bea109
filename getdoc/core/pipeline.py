"""
End-to-end orchestration: plan, check, analyse, extract, assemble.

Checks may run concurrently (``jobs > 1``). Each configuration's messages are
collected on their own and merged into the store afterwards in planning
order, so the report is identical to a sequential run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .analyzer import ImplicationAnalyzer
from .classifier import PathClassifier
from .config import GetDocConfig
from .diagnostic_store import DiagnosticStore
from .errors import CheckRunError, SourceParseError
from .extractor import SourceItemExtractor
from .manifest import read_manifest_features
from .markdown_report import MarkdownReportRenderer
from .models import (
    FeatureConfiguration,
    FileExtraction,
    ImplicatedFile,
    RawDiagnostic,
    ReportDocument,
)
from .planner import FeatureSetPlanner
from .report import ReportAssembler
from .runner import CargoCheckRunner
from .treesitter.rust_extractor import TreeSitterRustExtractor

logger = logging.getLogger(__name__)


class ProgressObserver:
    """Receives pipeline progress events. All hooks default to no-ops."""

    def planned(self, configurations: Sequence[FeatureConfiguration]) -> None:
        pass

    def check_started(self, configuration: FeatureConfiguration) -> None:
        pass

    def check_finished(
        self, configuration: FeatureConfiguration, message_count: int, error: Optional[str] = None
    ) -> None:
        pass

    def file_started(self, path: str) -> None:
        pass

    def finished(self, document: ReportDocument) -> None:
        pass


class LoggingProgressObserver(ProgressObserver):
    def planned(self, configurations):
        logger.info(f"Checking {len(configurations)} feature configuration(s)")

    def check_started(self, configuration):
        logger.info(f"Checking '{configuration.name}' ({configuration.description})")

    def check_finished(self, configuration, message_count, error=None):
        if error:
            logger.error(f"Check '{configuration.name}' failed: {error}")
        else:
            logger.debug(f"Check '{configuration.name}' produced {message_count} message(s)")

    def file_started(self, path):
        logger.info(f"Inspecting: {path}")


@dataclass
class CheckOutcome:
    configuration: FeatureConfiguration
    records: List[RawDiagnostic] = field(default_factory=list)
    error: Optional[str] = None


def _now() -> datetime:
    return datetime.now().astimezone()


class GetDocPipeline:
    def __init__(
        self,
        runner: CargoCheckRunner,
        classifier: PathClassifier,
        parser: Optional[TreeSitterRustExtractor] = None,
        observer: Optional[ProgressObserver] = None,
        jobs: int = 1,
        clock: Callable[[], datetime] = _now,
    ):
        self.runner = runner
        self.classifier = classifier
        self.parser = parser or TreeSitterRustExtractor()
        self.observer = observer or LoggingProgressObserver()
        self.jobs = max(1, jobs)
        self.clock = clock
        self.planner = FeatureSetPlanner()
        self.extractor = SourceItemExtractor()
        self.assembler = ReportAssembler()

    @classmethod
    def from_config(cls, config: GetDocConfig, observer: Optional[ProgressObserver] = None) -> "GetDocPipeline":
        registry_root, git_root = config.dependency_roots()
        return cls(
            runner=CargoCheckRunner(
                project_root=config.resolve_project_root(),
                cargo_command=config.cargo_command,
                extra_args=config.extra_check_args,
            ),
            classifier=PathClassifier(registry_root, git_root),
            observer=observer,
            jobs=config.jobs,
        )

    def run(
        self,
        declared_features: Iterable[str],
        focus: Optional[Sequence[str]] = None,
        default_features: Iterable[str] = (),
    ) -> ReportDocument:
        # Unknown focus features fail here, before any check runs
        configurations = self.planner.plan(declared_features, focus, default_features)
        mode = self.planner.mode_for(focus)
        self.observer.planned(configurations)

        store = DiagnosticStore(configurations)
        for outcome in self.check_all(configurations):
            if outcome.error is not None:
                store.record_failure(outcome.configuration.name, outcome.error)
            else:
                store.record(outcome.configuration.name, outcome.records)

        implicated = ImplicationAnalyzer(self.classifier).analyze(store.diagnostics())
        extractions: Dict[str, FileExtraction] = {
            path: self.extract_file(entry) for path, entry in implicated.items()
        }

        document = self.assembler.assemble(
            mode=mode,
            configurations=store.by_configuration(),
            implicated=implicated,
            extractions=extractions,
            timestamp=self.clock(),
            explanations=store.explanations(),
        )
        self.observer.finished(document)
        return document

    def check_all(self, configurations: Sequence[FeatureConfiguration]) -> List[CheckOutcome]:
        if self.jobs == 1 or len(configurations) <= 1:
            return [self._check(configuration) for configuration in configurations]
        return asyncio.run(self._check_all_async(configurations))

    async def _check_all_async(self, configurations: Sequence[FeatureConfiguration]) -> List[CheckOutcome]:
        semaphore = asyncio.Semaphore(self.jobs)

        async def check(configuration: FeatureConfiguration) -> CheckOutcome:
            async with semaphore:
                return await asyncio.to_thread(self._check, configuration)

        # gather keeps planning order regardless of completion order
        return list(await asyncio.gather(*(check(c) for c in configurations)))

    def _check(self, configuration: FeatureConfiguration) -> CheckOutcome:
        self.observer.check_started(configuration)
        try:
            records = self.runner.run(configuration)
        except CheckRunError as e:
            self.observer.check_finished(configuration, 0, error=e.message)
            return CheckOutcome(configuration=configuration, error=e.message)
        self.observer.check_finished(configuration, len(records))
        return CheckOutcome(configuration=configuration, records=list(records))

    def extract_file(self, implicated: ImplicatedFile) -> FileExtraction:
        """Extract items for one file; read and parse failures become a placeholder."""
        self.observer.file_started(implicated.path)
        try:
            tree = self.parser.parse_file(Path(implicated.path))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {implicated.path}: {e}")
            return FileExtraction(path=implicated.path, error=f"could not read file ({e})")
        except SourceParseError as e:
            logger.warning(e.message)
            return FileExtraction(path=implicated.path, error=f"could not parse file ({e.message})")

        items = self.extractor.extract(tree, implicated.ranges)
        if not items:
            logger.info(f"No items intersecting the referenced lines in {implicated.path}")
        return FileExtraction(path=implicated.path, items=tuple(items))


def generate_report(
    config: GetDocConfig,
    observer: Optional[ProgressObserver] = None,
    renderer: Optional[MarkdownReportRenderer] = None,
) -> Path:
    """Run the whole tool for ``config`` and write the Markdown report. Returns its path."""
    manifest = read_manifest_features(config.resolve_manifest_path())
    pipeline = GetDocPipeline.from_config(config, observer=observer)
    document = pipeline.run(
        manifest.declared,
        focus=config.features,
        default_features=manifest.default_enabled,
    )
    renderer = renderer or MarkdownReportRenderer()
    return renderer.write(document, config.resolve_output_path())
