"""
End-to-end tests for the getdoc pipeline with a scripted check runner.
"""

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from getdoc.core.classifier import PathClassifier
from getdoc.core.config import GetDocConfig
from getdoc.core.errors import CheckRunError, ConfigurationError, SourceParseError
from getdoc.core.models import ItemKind, LineRange
from getdoc.core.pipeline import GetDocPipeline, ProgressObserver, generate_report
from getdoc.core.runner import CargoCheckRunner

from conftest import make_raw

CRATE_SOURCE = """//! Crate docs.

use std::fmt;

pub const LIMIT: u32 = 3;

/// Converts a value.
/// Saturates on overflow.
pub fn convert(value: u32) -> u64 {
    let doubled = value * 2;
    let tripled = doubled + value;
    let widened = tripled as u64;
    let clamped = widened.min(u64::MAX);
    clamped
}
"""

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class ScriptedRunner:
    """Returns canned compiler messages per configuration name."""

    def __init__(self, script, failing=()):
        self.script = script
        self.failing = set(failing)
        self.calls = []

    def run(self, configuration):
        self.calls.append(configuration.name)
        if configuration.name in self.failing:
            raise CheckRunError("cargo crashed", configuration=configuration.name)
        return list(self.script.get(configuration.name, []))


class RecordingObserver(ProgressObserver):
    def __init__(self):
        self.events = []

    def planned(self, configurations):
        self.events.append(("planned", len(configurations)))

    def file_started(self, path):
        self.events.append(("file", path))

    def finished(self, document):
        self.events.append(("finished", document.diagnostic_count))


@pytest.fixture
def registry(tmp_path):
    root = tmp_path / "cargo" / "registry" / "src"
    crate = root / "index.crates.io-1949cf8c6b5b557f" / "widen-0.2.0" / "src"
    crate.mkdir(parents=True)
    (crate / "lib.rs").write_text(CRATE_SOURCE, encoding="utf-8")
    return root


@pytest.fixture
def crate_file(registry):
    return str(registry / "index.crates.io-1949cf8c6b5b557f" / "widen-0.2.0" / "src" / "lib.rs")


def _pipeline(runner, registry, **kwargs):
    return GetDocPipeline(
        runner=runner,
        classifier=PathClassifier(str(registry)),
        clock=lambda: FIXED_TIME,
        **kwargs,
    )


def _script(crate_file):
    return {
        "default": [
            make_raw("arithmetic overflow", file_path=crate_file, line_start=10, line_end=12, code="E0080"),
            make_raw("unused import", file_path="src/main.rs", line_start=1, level="warning"),
        ],
        "all-features": [
            make_raw("type annotations needed", file_path=crate_file, line_start=11, line_end=12, code="E0282"),
        ],
    }


def test_end_to_end_extracts_implicated_function(registry, crate_file):
    runner = ScriptedRunner(_script(crate_file))

    document = _pipeline(runner, registry).run([])

    assert runner.calls == ["default", "no-default", "all-features"]
    assert document.generated_at == FIXED_TIME
    assert document.diagnostic_count == 3
    assert len(document.files) == 1

    file_report = document.files[0]
    assert file_report.implicated.path == crate_file
    assert file_report.implicated.ranges == (LineRange(10, 12),)
    assert [d.message for d in file_report.implicated.diagnostics] == [
        "arithmetic overflow",
        "type annotations needed",
    ]

    items = file_report.extraction.items
    assert [item.name for item in items] == ["convert"]
    assert items[0].kind is ItemKind.FUNCTION
    assert items[0].documentation == ("Converts a value.", "Saturates on overflow.")
    assert (items[0].line_start, items[0].line_end) == (9, 15)


def test_failed_configuration_does_not_stop_the_run(registry, crate_file):
    runner = ScriptedRunner(_script(crate_file), failing={"no-default"})

    document = _pipeline(runner, registry).run([])

    groups = {group.configuration.name: group for group in document.configurations}
    assert groups["no-default"].failure == "cargo crashed"
    assert groups["default"].failure is None
    assert document.diagnostic_count == 3


def test_unreadable_file_becomes_placeholder(registry):
    missing = str(registry / "gone-1.0.0" / "src" / "lib.rs")
    runner = ScriptedRunner({"default": [make_raw("broken", file_path=missing, line_start=3)]})

    document = _pipeline(runner, registry).run([])

    extraction = document.files[0].extraction
    assert extraction.failed
    assert extraction.error.startswith("could not read file")


class RejectingParser:
    def parse_file(self, path):
        raise SourceParseError(f"Tree-sitter could not parse {path}: bad input", file_path=str(path))


def test_unparsable_file_becomes_placeholder(registry, crate_file):
    runner = ScriptedRunner(_script(crate_file))

    document = _pipeline(runner, registry, parser=RejectingParser()).run([])

    extraction = document.files[0].extraction
    assert extraction.failed
    assert extraction.items == ()
    assert extraction.error.startswith("could not parse file")
    assert "bad input" in extraction.error


def test_cargo_failing_before_compiling_is_recorded(registry, tmp_path):
    stderr = "error: failed to select a version for the requirement `serde = \"^9\"`\n"
    completed = subprocess.CompletedProcess(args=[], returncode=101, stdout="", stderr=stderr)

    with patch("getdoc.core.runner.subprocess.run", return_value=completed):
        document = _pipeline(CargoCheckRunner(tmp_path), registry).run([])

    assert document.diagnostic_count == 0
    for group in document.configurations:
        assert group.failure is not None
        assert "failed to select a version" in group.failure


def test_concurrent_checks_match_sequential(registry, crate_file):
    script = _script(crate_file)
    sequential = _pipeline(ScriptedRunner(script), registry, jobs=1).run(["a", "b"])
    concurrent = _pipeline(ScriptedRunner(script), registry, jobs=4).run(["a", "b"])

    assert sequential == concurrent
    assert [d.configurations for g in concurrent.configurations for d in g.diagnostics] == [
        ("default",), ("default",), ("all-features",),
    ]


def test_unknown_focus_fails_before_checks(registry):
    runner = ScriptedRunner({})

    with pytest.raises(ConfigurationError):
        _pipeline(runner, registry).run(["x"], focus=["y"])

    assert runner.calls == []


def test_targeted_mode(registry, crate_file):
    runner = ScriptedRunner(_script(crate_file))

    document = _pipeline(runner, registry).run(["a", "b"], focus=["b"])

    assert runner.calls == ["feature b + no-default", "feature b + default", "default"]
    assert document.mode.describe() == "Targeted Mode for Features: `b`"


def test_observer_events(registry, crate_file):
    observer = RecordingObserver()

    _pipeline(ScriptedRunner(_script(crate_file)), registry, observer=observer).run([])

    assert observer.events == [("planned", 3), ("file", crate_file), ("finished", 3)]


def test_generate_report_writes_markdown(tmp_path):
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\n\n[features]\nfast = []\n', encoding="utf-8")
    config = GetDocConfig(project_root=str(tmp_path), cargo_home=str(tmp_path / "cargo"))
    completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

    with patch("getdoc.core.runner.subprocess.run", return_value=completed) as run:
        output = generate_report(config)

    assert run.call_count == 4
    assert output == Path(tmp_path).resolve() / "report.md"
    text = output.read_text(encoding="utf-8")
    assert "`feature fast + no-default`" in text
    assert "No third-party source was implicated" in text
