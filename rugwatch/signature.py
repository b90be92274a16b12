import logging
import re
import time
from collections.abc import Iterable

from .models import Finding, Rule, Severity

logger = logging.getLogger(__name__)


def _rule(key: str, pattern: str, severity: Severity, description: str, solution: str) -> Rule:
    # Case-insensitive, and "." never crosses a newline so a match is line-local
    # unless the pattern itself spells out whitespace.
    return Rule(key, re.compile(pattern, re.IGNORECASE), severity, description, solution)


# Catalog order is the order findings are reported in.
RULES: tuple[Rule, ...] = (
    _rule(
        "reentrancy",
        r"(\.\s*call\s*\{[^}\n]*\}\s*\([^)\n]*\))(?!.*\s+_amount\s*=\s*0)",
        Severity.HIGH,
        "Potential reentrancy vulnerability. External call is made before state variables are updated.",
        "Follow the checks-effects-interactions pattern: update state variables before making external calls.",
    ),
    _rule(
        "tx_origin",
        r"tx\.origin",
        Severity.HIGH,
        "Usage of tx.origin for authorization which is unsafe and vulnerable to phishing attacks.",
        "Use msg.sender instead of tx.origin for authorization.",
    ),
    _rule(
        "unchecked_call_return",
        r"\.call\{[^}\n]*\}\([^)\n]*\)(?!.*require\(|\.\s*transfer|\.\s*send)",
        Severity.MEDIUM,
        "Unchecked return value from low-level call. This could lead to silent failures.",
        "Always check the return value of low-level calls or use the SafeERC20 library.",
    ),
    _rule(
        "owner_privileges",
        r"onlyOwner|Ownable|require\(\s*msg\.sender\s*==\s*owner\s*\)",
        Severity.MEDIUM,
        "Owner has high privileges in the contract. This could be risky if the owner is malicious or compromised.",
        "Consider implementing a multi-signature mechanism for sensitive operations or removing/renouncing ownership.",
    ),
    _rule(
        "transfer_ownership",
        r"transferOwnership",
        Severity.LOW,
        "Contract allows ownership transfer which could be exploited if not properly secured.",
        "Ensure ownership transfers have proper security mechanisms like multi-sig or timelock delays.",
    ),
    _rule(
        "hardcoded_address",
        r"address\s*\(\s*0x[a-fA-F0-9]{40}\s*\)",
        Severity.LOW,
        "Hardcoded addresses in the contract can cause issues if those addresses need to change.",
        "Use state variables that can be updated by governance or admin functions instead of hardcoded addresses.",
    ),
    _rule(
        "pausable_tokens",
        r"pause|pausable|whenNotPaused",
        Severity.MEDIUM,
        "Contract includes functions to pause operations, giving owners significant control.",
        "If pausability is required, implement proper governance around the pause functionality.",
    ),
    _rule(
        "blacklist_feature",
        r"blacklist|blocklist|banned|exclude",
        Severity.MEDIUM,
        "Contract has ability to blacklist/block addresses from transacting.",
        "Blacklist functionality should be transparent and ideally governed by community voting.",
    ),
    _rule(
        "minting_function",
        r"mint(?!.*burn)|function\s+mint",
        Severity.HIGH,
        "Contract can mint new tokens which may lead to supply inflation.",
        "Implement minting caps, timelock periods, or community governance for minting operations.",
    ),
    _rule(
        "self_destruct",
        r"selfdestruct|suicide",
        Severity.HIGH,
        "Contract can be self-destructed, which could lead to loss of funds and contract state.",
        "Remove self-destruct functionality or implement strong access controls and time delays.",
    ),
)


def _check_unique(rules: Iterable[Rule]) -> None:
    seen: set[str] = set()
    for rule in rules:
        if rule.key in seen:
            raise ValueError(f"Duplicate rule key in catalog: {rule.key}")
        seen.add(rule.key)


_check_unique(RULES)


def display_name(key: str) -> str:
    """``tx_origin`` -> ``Tx Origin``."""
    return " ".join(part.capitalize() for part in key.split("_") if part)


def _as_text(content) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray)):
        return bytes(content).decode("utf-8", errors="replace")
    return ""


def first_matching_line(pattern: re.Pattern[str], text: str) -> int | None:
    """1-based number of the first line the pattern matches on its own."""
    for i, line in enumerate(text.split("\n"), 1):
        if pattern.search(line):
            return i
    return None


class SignatureScanner:
    """Run the rule catalog against contract source text."""

    def __init__(self, rules: Iterable[Rule] | None = None):
        self.rules = tuple(RULES if rules is None else rules)
        _check_unique(self.rules)

    def scan(self, content) -> list[Finding]:
        findings: list[Finding] = []
        text = _as_text(content)
        if not text:
            return findings

        stamp = int(time.time() * 1000)
        for rule in self.rules:
            if not rule.pattern.search(text):
                continue
            line = first_matching_line(rule.pattern, text)
            if line is None:
                logger.debug("Rule %s matched across lines; no line recorded", rule.key)
            findings.append(Finding(
                id=f"V-{rule.key}-{stamp}",
                rule_key=rule.key,
                name=display_name(rule.key),
                description=rule.description,
                severity=rule.severity,
                solution=rule.solution,
                line=line,
            ))
        return findings


_DEFAULT_SCANNER = SignatureScanner()


def scan(source_text) -> list[Finding]:
    """Scan contract source with the built-in catalog. Never raises."""
    return _DEFAULT_SCANNER.scan(source_text)
