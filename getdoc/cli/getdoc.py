"""
Command-line entry point for getdoc.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from getdoc.core.config import load_config
from getdoc.core.errors import ExitCode, GetDocError
from getdoc.core.pipeline import ProgressObserver, generate_report


def _split_features(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class TqdmProgressObserver(ProgressObserver):
    """Shows one progress bar tick per finished configuration check."""

    def __init__(self, disable: bool = False):
        self.disable = disable
        self.bar: Optional[tqdm] = None

    def planned(self, configurations):
        self.bar = tqdm(total=len(configurations), desc="cargo check", unit="config",
                        disable=self.disable, file=sys.stderr)

    def check_finished(self, configuration, message_count, error=None):
        if self.bar is None:
            return
        if error:
            self.bar.write(f"❌ {configuration.name}: {error}", file=sys.stderr)
        self.bar.set_postfix_str(configuration.name)
        self.bar.update(1)

    def file_started(self, path):
        self._close()
        logging.info(f"Inspecting: {path}")

    def finished(self, document):
        self._close()

    def _close(self):
        if self.bar is not None:
            self.bar.close()
            self.bar = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="getdoc",
        description="Check a cargo project under several feature configurations and report "
                    "compiler diagnostics together with the third-party source they implicate."
    )
    parser.add_argument("--features", type=_split_features, default=None,
                        help="Comma-separated features to focus on (targeted mode). "
                             "Omit for comprehensive mode.")
    parser.add_argument("--project-root", help="Directory of the cargo project (default: current directory).")
    parser.add_argument("--manifest-path", help="Path to Cargo.toml (default: <project-root>/Cargo.toml).")
    parser.add_argument("--output", dest="output_path", help="Report path (default: report.md).")
    parser.add_argument("--config", help="Path to configuration YAML file (default: getdoc.config.yaml)")
    parser.add_argument("--cargo-home", help="Cargo home holding the registry and git caches "
                                             "(default: $CARGO_HOME or ~/.cargo).")
    parser.add_argument("--jobs", type=int, help="Number of configurations to check concurrently (default: 1).")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    return parser


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides = {
        "features": args.features,
        "project_root": args.project_root,
        "manifest_path": args.manifest_path,
        "output_path": args.output_path,
        "cargo_home": args.cargo_home,
        "jobs": args.jobs,
    }
    if args.project_root:
        overrides["project_root"] = str(Path(args.project_root).resolve())
    return overrides


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, stream=sys.stderr, format="[getdoc] %(levelname)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for getdoc."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        config = load_config(config_path=args.config, cli_args=_cli_overrides(args))
        if config.features:
            print(f"🎯 Starting analysis in Targeted Mode for: {', '.join(config.features)}")
        else:
            print("🚀 Starting analysis in Comprehensive Mode for multiple feature sets...")

        output_path = generate_report(config, observer=TqdmProgressObserver(disable=args.quiet))
    except GetDocError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return int(e.exit_code)

    print(f"📄 Analysis complete. Report generated: {output_path}")
    return int(ExitCode.SUCCESS)


if __name__ == "__main__":
    sys.exit(main())
