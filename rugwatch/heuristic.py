import re
from collections.abc import Iterable

from .models import AuditSummary, Finding
from .scoring import score, severity_counts

MINIMAL_COMMENT_RATIO = 0.05
MODERATE_COMMENT_RATIO = 0.15
COMPLEX_CONTRACT_LINES = 1000

_LINE_COMMENT_RE = re.compile(r"//")
_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")

_SAFE_MATH_MARKERS = ("SafeMath",)
_REENTRANCY_GUARD_MARKERS = ("ReentrancyGuard", "nonReentrant")


def _owner_gated(capability: str) -> re.Pattern[str]:
    # Capability and gate must share a line, in either order.
    cap = re.escape(capability)
    return re.compile(rf"{cap}.*onlyOwner|onlyOwner.*{cap}", re.IGNORECASE)


OWNER_PERMISSION_CHECKS: tuple[tuple[re.Pattern[str], str], ...] = (
    (_owner_gated("mint"), "Owner can mint new tokens"),
    (_owner_gated("pause"), "Owner can pause trading"),
    (_owner_gated("excludeFromFee"), "Owner can exclude addresses from fees"),
    (_owner_gated("setFee"), "Owner can modify fees"),
    (_owner_gated("withdraw"), "Owner can withdraw funds"),
    (_owner_gated("blacklist"), "Owner can blacklist addresses"),
    (_owner_gated("maxTx"), "Owner can set maximum transaction amount"),
)


def owner_permissions(source_text: str) -> list[str]:
    """Describe what the owner can do, in a fixed check order."""
    return [
        description
        for pattern, description in OWNER_PERMISSION_CHECKS
        if pattern.search(source_text)
    ]


def comment_ratio(source_text: str) -> tuple[int, float]:
    """Return (line count, comment markers per line)."""
    lines = len(source_text.split("\n"))
    comments = (
        len(_LINE_COMMENT_RE.findall(source_text))
        + len(_BLOCK_COMMENT_RE.findall(source_text))
    )
    return lines, comments / lines


def code_quality(source_text: str, ratio: float) -> str:
    if ratio < MINIMAL_COMMENT_RATIO:
        quality = "The contract has minimal comments, which makes it harder to understand and audit."
    elif ratio < MODERATE_COMMENT_RATIO:
        quality = (
            "The contract has a moderate level of comments, "
            "but more detailed documentation would be beneficial."
        )
    else:
        quality = "The contract is well-commented, which is good for clarity and maintainability."

    if any(marker in source_text for marker in _SAFE_MATH_MARKERS):
        quality += (
            " The contract uses SafeMath to prevent integer overflows,"
            " which is a good security practice."
        )
    if any(marker in source_text for marker in _REENTRANCY_GUARD_MARKERS):
        quality += " The contract implements reentrancy guards to prevent reentrancy attacks."
    return quality


def summarize(source_text: str, findings: Iterable[Finding]) -> AuditSummary:
    """Build the audit narrative for one contract and its findings."""
    if isinstance(source_text, (bytes, bytearray)):
        source_text = bytes(source_text).decode("utf-8", errors="replace")
    elif source_text is None:
        source_text = ""

    findings = list(findings)

    lines, ratio = comment_ratio(source_text)
    kind = "complex" if lines > COMPLEX_CONTRACT_LINES else "standard"

    return AuditSummary(
        code_quality=code_quality(source_text, ratio),
        system_overview=f"This is a {kind} smart contract with {lines} lines of code.",
        lines_of_code=lines,
        comment_ratio=ratio,
        privileged_roles=tuple(owner_permissions(source_text)),
        key_risks=tuple(f.description for f in findings),
        risk_score=score(findings),
        vulnerabilities_count=severity_counts(findings),
    )
