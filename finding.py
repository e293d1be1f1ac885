from dataclasses import dataclass
from typing import Any


BAN_SUGGESTION = "Replace this call with an allowed API, or remove it."


@dataclass(frozen=True)
class Finding:
    start_offset: int
    width: int
    message: str
    line: int | None = None
    column: int | None = None
    rule: str = "ban"

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.width

    def to_item(self) -> dict[str, Any]:
        return {
            "severity": "warning",
            "source": "rule",
            "rule": self.rule,
            "line": self.line,
            "column": self.column,
            "offset": self.start_offset,
            "width": self.width,
            "message": self.message,
            "suggestion": BAN_SUGGESTION,
            "confidence": 1.0,
        }
