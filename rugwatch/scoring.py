from collections.abc import Iterable

from .models import Finding, Severity

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.HIGH: 25,
    Severity.MEDIUM: 10,
    Severity.LOW: 3,
}

MAX_SCORE = 100


def score(findings: Iterable[Finding]) -> int:
    """Saturating weighted sum of findings, clamped to [0, 100]."""
    raw = sum(SEVERITY_WEIGHTS[f.severity] for f in findings)
    return max(0, min(MAX_SCORE, raw))


def severity_counts(findings: Iterable[Finding]) -> dict[str, int]:
    counts = {sev.label: 0 for sev in sorted(Severity, reverse=True)}
    for f in findings:
        counts[f.severity.label] += 1
    return counts
