import logging
from typing import Callable

from .heuristic import summarize
from .models import AuditRun, ContractReport, Severity
from .scoring import score
from .signature import SignatureScanner
from .utils import discover_files, read_source_safe

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def audit_source(
    source_text: str,
    file_path: str = "<source>",
    scanner: SignatureScanner | None = None,
    severity_level: Severity = Severity.LOW,
) -> ContractReport:
    """Scan, score and summarize one in-memory contract."""
    scanner = scanner or SignatureScanner()
    findings = [
        f for f in scanner.scan(source_text)
        if f.severity >= severity_level
    ]
    return ContractReport(
        file_path=file_path,
        findings=findings,
        summary=summarize(source_text, findings),
        risk_score=score(findings),
    )


class ContractAnalyzer:
    """Orchestrator: discovery -> read -> signature scan -> summary."""

    def __init__(
        self,
        paths: list[str],
        extensions: set[str] | None = None,
        severity_level: Severity = Severity.LOW,
    ):
        self.paths = paths
        self.extensions = extensions
        self.severity_level = severity_level
        self.signature_scanner = SignatureScanner()

    def scan(
        self,
        progress_callback: ProgressCallback | None = None,
    ) -> AuditRun:
        all_files: list[str] = []
        for path in self.paths:
            all_files.extend(discover_files(path, self.extensions))

        run = AuditRun(total_files=len(all_files))
        total = len(all_files)

        for idx, fpath in enumerate(all_files):
            if progress_callback:
                progress_callback(fpath, idx, total)

            report = self._scan_file(fpath)
            run.reports.append(report)
            if report.error:
                run.errors += 1

        run.reports.sort(key=lambda r: r.risk_score, reverse=True)

        for report in run.reports:
            for finding in report.findings:
                run.total_findings += 1
                sev_name = finding.severity.name
                run.severity_counts[sev_name] = run.severity_counts.get(sev_name, 0) + 1

        return run

    def _scan_file(self, path: str) -> ContractReport:
        content = read_source_safe(path)
        if content is None:
            return ContractReport(file_path=path, error="Could not read file")

        try:
            return audit_source(
                content,
                file_path=path,
                scanner=self.signature_scanner,
                severity_level=self.severity_level,
            )
        except Exception as e:
            logger.debug("Error analyzing %s: %s", path, e)
            return ContractReport(file_path=path, error=str(e))
