"""Formatting and parsing of date-time text fields."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..config.timer_config import DEFAULT_TIME_FORMAT

DEFAULT_INPUT_FORMATS = (
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a date-time string: a value or an error."""

    value: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TimeTextFormatter:
    """Converts between timestamps and the text shown in edit fields.

    ``parse`` never raises; a malformed string or an impossible calendar date
    comes back as a failed ``ParseResult``.
    """

    def __init__(
        self,
        time_format: str = DEFAULT_TIME_FORMAT,
        input_formats: Sequence[str] = DEFAULT_INPUT_FORMATS,
    ):
        """Initialize formatter.

        Args:
            time_format: strftime pattern used for display, also accepted on input
            input_formats: Additional strptime patterns accepted on input
        """
        self.time_format = time_format
        self.input_formats = [time_format] + [
            fmt for fmt in input_formats if fmt != time_format
        ]

    def format(self, value: Optional[datetime]) -> str:
        if value is None:
            return ""
        return value.strftime(self.time_format)

    def parse(self, text: Optional[str]) -> ParseResult:
        """Parse user text into a timestamp.

        Args:
            text: Text typed by the user

        Returns:
            ParseResult: Parsed value, or the reason parsing failed
        """
        if text is None or not text.strip():
            return ParseResult(error="empty")

        candidate = " ".join(text.split())
        for fmt in self.input_formats:
            try:
                return ParseResult(value=datetime.strptime(candidate, fmt))
            except ValueError:
                continue

        try:
            value = datetime.fromisoformat(candidate)
        except ValueError as e:
            return ParseResult(error=str(e))

        # Stored times are naive local time
        if value.tzinfo is not None:
            return ParseResult(error="timezone offsets are not supported")
        return ParseResult(value=value)
