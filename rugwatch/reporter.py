import json
from datetime import datetime, timezone

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .models import AggregateResult, AuditRun, ContractReport, RiskLevel, Severity

SEVERITY_COLORS = {
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}

LEVEL_COLORS = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


def print_banner(console: Console) -> None:
    banner = (
        "[bold cyan]RugWatch[/bold cyan] v" + __version__ + "\n"
        "[dim]Smart Contract & Token Risk Analyzer[/dim]"
    )
    console.print(Panel(banner, border_style="cyan", expand=False))


def print_results(console: Console, run: AuditRun, verbose: bool = False) -> None:
    if not run.reports:
        console.print("\n[yellow]No contract sources found.[/yellow]")
        return

    console.print(f"\n[bold]Found {run.total_findings} findings in {len(run.reports)} contracts:[/bold]\n")

    for report in run.reports:
        _print_contract_report(console, report, verbose)


def _print_contract_report(console: Console, report: ContractReport, verbose: bool) -> None:
    if report.error:
        console.print(f"[red]{report.file_path}[/red]  [dim]{report.error}[/dim]\n")
        return

    max_severity = max((f.severity for f in report.findings), default=Severity.LOW)
    color = SEVERITY_COLORS.get(max_severity, "white") if report.findings else "green"
    console.print(f"[{color}]{report.file_path}[/{color}]  [dim]Risk Score: {report.risk_score}/100[/dim]")

    if report.findings:
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
        table.add_column("Rule", style="dim", width=22)
        table.add_column("Severity", width=8)
        table.add_column("Description")
        if verbose:
            table.add_column("Line", justify="right", width=6)
            table.add_column("Remediation", max_width=60)

        for finding in report.findings:
            sev_color = SEVERITY_COLORS.get(finding.severity, "white")
            row = [
                finding.name,
                f"[{sev_color}]{finding.severity.name}[/{sev_color}]",
                finding.description,
            ]
            if verbose:
                row.append(str(finding.line) if finding.line else "-")
                row.append(finding.solution)
            table.add_row(*row)
        console.print(table)
    else:
        console.print("[green]  No known risky constructs detected.[/green]")

    if verbose and report.summary:
        summary = report.summary
        body = [summary.system_overview, summary.code_quality]
        if summary.privileged_roles:
            body.append("\n[bold]Privileged roles[/bold]")
            body.extend(f"  - {role}" for role in summary.privileged_roles)
        console.print(Panel("\n".join(body), title="Audit Summary", border_style="dim"))
    console.print()


def print_summary(console: Console, run: AuditRun) -> None:
    table = Table(title="Audit Summary", show_header=False, border_style="dim")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Contracts scanned", str(run.total_files))
    table.add_row("Total findings", str(run.total_findings))
    table.add_row("High", f"[bold red]{run.severity_counts.get('HIGH', 0)}[/bold red]")
    table.add_row("Medium", f"[yellow]{run.severity_counts.get('MEDIUM', 0)}[/yellow]")
    table.add_row("Low", f"[cyan]{run.severity_counts.get('LOW', 0)}[/cyan]")
    table.add_row("Scan duration", f"{run.duration_seconds:.2f}s")
    if run.errors:
        table.add_row("Errors", f"[red]{run.errors}[/red]")

    console.print()
    console.print(table)


def print_signal_result(console: Console, result: AggregateResult) -> None:
    color = LEVEL_COLORS.get(result.level, "white")
    console.print(f"\nRisk level: [{color}]{result.level.name}[/{color}]")
    if not result.reasons:
        console.print("[green]No risk factors found.[/green]")
        return
    for reason in result.reasons:
        console.print(f"  - {reason}")


def export_json(run: AuditRun, output_path: str) -> None:
    data = {
        "version": __version__,
        "scan_time": datetime.now(timezone.utc).isoformat(),
        "total_files": run.total_files,
        "total_findings": run.total_findings,
        "severity_counts": run.severity_counts,
        "duration_seconds": round(run.duration_seconds, 2),
        "errors": run.errors,
        "results": [
            {
                "file": r.file_path,
                "risk_score": r.risk_score,
                "error": r.error,
                "findings": [f.to_dict() for f in r.findings],
                "summary": r.summary.to_dict() if r.summary else None,
            }
            for r in run.reports
        ],
    }
    with open(output_path, "w") as fp:
        json.dump(data, fp, indent=2)


def export_signals_json(result: AggregateResult, output_path: str) -> None:
    data = {
        "version": __version__,
        "scan_time": datetime.now(timezone.utc).isoformat(),
        **result.to_dict(),
    }
    with open(output_path, "w") as fp:
        json.dump(data, fp, indent=2)
