"""CI test result document published per platform."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..errors import InvalidPayloadError

_COUNT_FIELDS = ("passed", "failed", "skipped", "total")
_STRING_FIELDS = ("platform", "timestamp")


def _count(data: Dict[str, Any], name: str) -> int:
    """Read a non-negative count; whole-number floats such as 10.0 are accepted."""
    value = data.get(name)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    # bool is an int subclass; JSON true/false is not a count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayloadError(f"Missing or invalid field '{name}' (expected number)")
    if value < 0:
        raise InvalidPayloadError(f"Field '{name}' cannot be negative: {value}")
    return value


@dataclass(frozen=True)
class TestResultData:
    """Summary of one CI test run.

    Invariant: every count is non-negative and
    ``total == passed + failed + skipped``.
    """

    __test__ = False  # keep pytest from collecting this class

    platform: str
    passed: int
    failed: int
    skipped: int
    total: int
    timestamp: str
    url_html: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Any) -> "TestResultData":
        """Validate a decoded JSON document and build the model.

        Raises:
            InvalidPayloadError: the document is structurally invalid.
        """
        if not isinstance(data, dict):
            raise InvalidPayloadError("Test result payload is not an object")

        for name in _STRING_FIELDS:
            if not isinstance(data.get(name), str):
                raise InvalidPayloadError(f"Missing or invalid field '{name}' (expected string)")
        counts = {name: _count(data, name) for name in _COUNT_FIELDS}
        passed, failed, skipped, total = (counts[name] for name in _COUNT_FIELDS)
        if total != passed + failed + skipped:
            raise InvalidPayloadError(
                f"Total ({total}) doesn't match sum of passed ({passed}) + "
                f"failed ({failed}) + skipped ({skipped})"
            )

        url_html = data.get("url_html")
        if url_html is not None and not isinstance(url_html, str):
            raise InvalidPayloadError("Field 'url_html' should be string if present")

        return cls(
            platform=data["platform"],
            passed=passed,
            failed=failed,
            skipped=skipped,
            total=total,
            timestamp=data["timestamp"],
            url_html=url_html or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
