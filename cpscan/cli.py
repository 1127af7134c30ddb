"""Command-line interface for scanning creature-screen screenshots.

Subcommands scan one screenshot to JSON, scan a folder to CSV, parse an
already-recognized transcript, and benchmark the extractor on labeled
transcripts.
"""

import argparse
import asyncio
import csv
import json
import sys
from pathlib import Path

from cpscan.benchmark.evaluator import Evaluator, load_cases
from cpscan.extraction.field_extractor import FieldExtractor
from cpscan.ocr.transcript import Transcript
from cpscan.scanner import ScanResult, ScreenScanner
from cpscan.utils.config import load_config
from cpscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.webp", "*.bmp")
_META_COLUMNS = ["filename", "status", "message", "validation_passed"]
_FIELD_COLUMNS = ["name", "cp", "hp", "stardust", "moves"]


def _find_screenshots(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of image paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def scan_result_to_dict(scan: ScanResult) -> dict[str, object]:
    """Turn a scan result into a JSON-serializable record."""
    record: dict[str, object] = {
        "filename": scan.source_file,
        "status": scan.status,
        "message": scan.message,
        "fields": scan.result.to_dict(),
    }
    if scan.validation is not None:
        record["validation"] = {
            "all_valid": scan.validation.all_valid,
            "results": [
                {
                    "field_name": r.field_name,
                    "is_valid": r.is_valid,
                    "message": r.message,
                    "rule_name": r.rule_name,
                }
                for r in scan.validation.results
            ],
        }
    return record


def scan_single(file_path: Path, config_path: Path | None = None) -> dict[str, object]:
    """Scan one screenshot and return its JSON record.

    Args:
        file_path: Path to the screenshot.
        config_path: Optional configuration file.

    Returns:
        Dictionary with filename, status, message, fields and validation.
    """
    scanner = ScreenScanner(load_config(config_path))
    scan = asyncio.run(scanner.scan(file_path, file_path.name))
    return scan_result_to_dict(scan)


async def _scan_all(scanner: ScreenScanner, files: list[Path], verbose: bool) -> list[dict]:
    rows: list[dict] = []
    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Scanning [{i}/{len(files)}]: {file_path.name}")
        try:
            scan = await scanner.scan(file_path, file_path.name)
        except ValueError as exc:
            logger.error("Failed to read %s: %s", file_path.name, exc)
            rows.append({"filename": file_path.name, "status": "failed", "message": str(exc)})
            continue

        row: dict[str, object] = {
            "filename": file_path.name,
            "status": scan.status,
            "message": scan.message,
            "validation_passed": (
                scan.validation.all_valid if scan.validation is not None else ""
            ),
        }
        row.update(scan.result.to_flat_dict())
        rows.append(row)
    return rows


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
    config_path: Path | None = None,
) -> dict[str, int]:
    """Scan every screenshot in a folder and export the fields to CSV.

    Args:
        input_dir: Directory containing screenshots.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.
        config_path: Optional configuration file.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    files = _find_screenshots(input_dir)
    if not files:
        logger.warning("No screenshots found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d screenshots to scan", len(files))
    scanner = ScreenScanner(load_config(config_path))
    rows = asyncio.run(_scan_all(scanner, files, verbose))

    successful = sum(1 for r in rows if r["status"] == "complete")
    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": len(files) - successful}
    _print_summary(summary, output_csv)
    return summary


def parse_transcript(text: str, config_path: Path | None = None) -> dict[str, object]:
    """Run the extractor on plain text, one OCR line per text line."""
    config = load_config(config_path)
    transcript = Transcript.from_lines(text.splitlines(), full_text=text)
    return FieldExtractor(config.extraction).extract(transcript).to_dict()


def _write_csv(rows: list[dict], output_path: Path) -> None:
    """Write scan rows to CSV, metadata columns first."""
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(
            f, fieldnames=_META_COLUMNS + _FIELD_COLUMNS, extrasaction="ignore"
        )
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Scan Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Creature-screen scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="Configuration YAML file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan a single screenshot")
    scan_parser.add_argument("file", type=Path, help="Screenshot to scan")
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Scan a folder of screenshots")
    batch_parser.add_argument("input_dir", type=Path, help="Directory with screenshots")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    parse_parser = subparsers.add_parser(
        "parse", help="Extract fields from a text transcript"
    )
    parse_parser.add_argument("file", type=Path, help="Transcript, one OCR line per line")
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    bench_parser = subparsers.add_parser(
        "benchmark", help="Score the extractor on labeled transcripts"
    )
    bench_parser.add_argument("cases", type=Path, help="Labeled cases (.json or .csv)")
    bench_parser.add_argument("-o", "--output", type=Path, help="Report file")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command in ("scan", "parse", "benchmark"):
        target = args.cases if args.command == "benchmark" else args.file
        if not target.exists():
            print(f"Error: {target} does not exist", file=sys.stderr)
            sys.exit(1)

    if args.command == "scan":
        try:
            result = scan_single(args.file, args.config)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose, args.config)
    elif args.command == "parse":
        _emit(parse_transcript(args.file.read_text(), args.config), args.output)
    elif args.command == "benchmark":
        evaluator = Evaluator()
        result = evaluator.evaluate_transcripts(
            load_cases(args.cases), FieldExtractor(config.extraction)
        )
        print(evaluator.generate_report(result, args.output))
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
