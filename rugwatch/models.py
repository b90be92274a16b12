import math
import re
from dataclasses import asdict, dataclass, field
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationInfo, field_validator


class Severity(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class RiskLevel(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    def at_least(self, other: "RiskLevel") -> "RiskLevel":
        """Return this level raised to ``other`` if ``other`` is higher."""
        return max(self, other)


@dataclass(frozen=True)
class Rule:
    key: str
    pattern: re.Pattern[str]
    severity: Severity
    description: str
    solution: str


@dataclass(frozen=True)
class Finding:
    id: str
    rule_key: str
    name: str
    description: str
    severity: Severity
    solution: str
    line: int | None = None

    def comparable(self) -> dict:
        """Everything except the timestamped id."""
        return {
            "rule_key": self.rule_key,
            "name": self.name,
            "description": self.description,
            "severity": self.severity.label,
            "line": self.line,
            "solution": self.solution,
        }

    def to_dict(self) -> dict:
        return {"id": self.id, **self.comparable()}


@dataclass(frozen=True)
class AuditSummary:
    code_quality: str
    system_overview: str
    lines_of_code: int
    comment_ratio: float
    privileged_roles: tuple[str, ...]
    key_risks: tuple[str, ...]
    risk_score: int
    vulnerabilities_count: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["privileged_roles"] = list(self.privileged_roles)
        data["key_risks"] = list(self.key_risks)
        data["comment_ratio"] = round(self.comment_ratio, 4)
        return data


class SignalError(ValueError):
    """A signal bundle that does not honour the input contract."""


_NUMERIC_PREFIX_RE = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def parse_percentage(value, field_name: str = "value") -> float:
    """Read the numeric prefix of ``"12.5%"``-style values."""
    if isinstance(value, bool):
        raise SignalError(f"{field_name}: expected a percentage, got a boolean")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise SignalError(f"{field_name}: percentage must be finite, got {value!r}")
        return float(value)
    if not isinstance(value, str):
        raise SignalError(f"{field_name}: expected a percentage string, got {type(value).__name__}")
    match = _NUMERIC_PREFIX_RE.match(value)
    if not match:
        raise SignalError(f"{field_name}: no numeric prefix in {value!r}")
    return float(match.group(1))


class Signals(BaseModel):
    """One bundle of externally fetched token facts, in the camelCase wire shape."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    honeypot: StrictBool
    sell_tax: str | float = Field(alias="sellTax")
    buy_tax: str | float = Field(alias="buyTax")
    top_holder_share: str | float = Field(alias="topHolderShare")
    liquidity_locked: StrictBool = Field(alias="liquidityLocked")
    liquidity_lock_share: str | float = Field(alias="liquidityLockShare")
    verified: StrictBool
    warnings: tuple[StrictStr, ...] = ()

    @field_validator("sell_tax", "buy_tax", "top_holder_share", "liquidity_lock_share", mode="before")
    @classmethod
    def check_percentage(cls, value, info: ValidationInfo):
        parse_percentage(value, cls.model_fields[info.field_name].alias)
        return value

    @field_validator("warnings", mode="before")
    @classmethod
    def default_warnings(cls, value):
        return () if value is None else value


@dataclass(frozen=True)
class AggregateResult:
    level: RiskLevel
    reasons: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"level": self.level.name, "reasons": list(self.reasons)}


@dataclass
class ContractReport:
    file_path: str
    findings: list[Finding] = field(default_factory=list)
    summary: AuditSummary | None = None
    risk_score: int = 0
    error: str | None = None


@dataclass
class AuditRun:
    total_files: int = 0
    total_findings: int = 0
    severity_counts: dict[str, int] = field(default_factory=lambda: {
        "HIGH": 0, "MEDIUM": 0, "LOW": 0,
    })
    duration_seconds: float = 0.0
    reports: list[ContractReport] = field(default_factory=list)
    errors: int = 0
