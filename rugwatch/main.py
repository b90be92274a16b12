import argparse
import json
import logging
import sys
import time

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from . import __version__
from .analyzer import ContractAnalyzer
from .models import RiskLevel, Severity
from .reporter import (
    export_json,
    export_signals_json,
    print_banner,
    print_results,
    print_signal_result,
    print_summary,
)
from .signals import SignalError, aggregate
from .utils import DEFAULT_EXTENSIONS

# stderr for progress/status, stdout for results (pipeable)
stderr_console = Console(stderr=True)
stdout_console = Console()

SEVERITY_MAP = {
    "low": Severity.LOW,
    "medium": Severity.MEDIUM,
    "high": Severity.HIGH,
}

EXIT_OK = 0
EXIT_HIGH_RISK = 1
EXIT_BAD_INPUT = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rugwatch",
        description="Flag risky smart-contract constructs and rate token risk signals.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    contract = sub.add_parser("contract", help="Audit contract source files")
    contract.add_argument(
        "--path",
        nargs="+",
        default=["."],
        help="Files or directories to scan (default: current directory)",
    )
    contract.add_argument(
        "--ext",
        nargs="+",
        default=None,
        help=f"File extensions to scan (default: {' '.join(sorted(DEFAULT_EXTENSIONS))})",
    )
    contract.add_argument(
        "--severity-level",
        choices=["low", "medium", "high"],
        default="low",
        help="Minimum severity to report (default: low)",
    )

    signals = sub.add_parser("signals", help="Rate a token from a JSON signal bundle")
    signals.add_argument("file", help="JSON file holding one signal bundle")

    for p in (contract, signals):
        p.add_argument(
            "--json-output",
            metavar="FILE",
            help="Export results to JSON file",
        )
        p.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Show line numbers, remediation and audit summaries",
        )
    return parser.parse_args(argv)


def run_contract(args: argparse.Namespace) -> int:
    extensions = {e if e.startswith(".") else f".{e}" for e in args.ext} if args.ext else None
    analyzer = ContractAnalyzer(
        paths=args.path,
        extensions=extensions,
        severity_level=SEVERITY_MAP[args.severity_level],
    )

    start = time.monotonic()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=stderr_console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("Scanning...", total=None)

        def on_progress(fpath: str, idx: int, total: int) -> None:
            if progress.tasks[0].total is None:
                progress.update(task_id, total=total)
            progress.update(task_id, completed=idx + 1, description=f"Scanning {fpath[-60:]}")

        run = analyzer.scan(progress_callback=on_progress)

    run.duration_seconds = time.monotonic() - start

    print_results(stdout_console, run, verbose=args.verbose)
    print_summary(stdout_console, run)

    if args.json_output:
        export_json(run, args.json_output)
        stderr_console.print(f"\n[green]Results exported to {args.json_output}[/green]")

    return EXIT_HIGH_RISK if run.severity_counts.get("HIGH", 0) > 0 else EXIT_OK


def run_signals(args: argparse.Namespace) -> int:
    try:
        with open(args.file, encoding="utf-8") as fp:
            bundle = json.load(fp)
        result = aggregate(bundle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, SignalError) as e:
        stderr_console.print(f"[bold red]Invalid signal bundle:[/bold red] {escape(str(e))}")
        return EXIT_BAD_INPUT

    print_signal_result(stdout_console, result)

    if args.json_output:
        export_signals_json(result, args.json_output)
        stderr_console.print(f"\n[green]Results exported to {args.json_output}[/green]")

    return EXIT_HIGH_RISK if result.level is RiskLevel.HIGH else EXIT_OK


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    print_banner(stderr_console)

    try:
        if args.command == "contract":
            code = run_contract(args)
        else:
            code = run_signals(args)
    except KeyboardInterrupt:
        stderr_console.print("\n[yellow]Scan interrupted.[/yellow]")
        sys.exit(130)

    sys.exit(code)


if __name__ == "__main__":
    main()
