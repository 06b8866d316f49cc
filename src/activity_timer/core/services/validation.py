"""Validation messages for editable fields."""

from typing import Dict

START_TIME_FIELD = "start_time"
END_TIME_FIELD = "end_time"

# Declaration order is the order messages are shown in
FIELD_MESSAGES = {
    START_TIME_FIELD: "Please enter a valid start date and time.",
    END_TIME_FIELD: "Please enter a valid end date and time.",
}


class ValidationMessages:
    """Tracks one current message per field.

    Repeated failures on the same field do not duplicate its message.
    """

    def __init__(self):
        self._messages: Dict[str, str] = {field: "" for field in FIELD_MESSAGES}

    def set_error(self, field: str) -> None:
        """Record the fixed message for a field.

        Raises:
            KeyError: If the field is unknown
        """
        self._messages[field] = FIELD_MESSAGES[field]

    def clear(self, field: str) -> None:
        if field in self._messages:
            self._messages[field] = ""

    def clear_all(self) -> None:
        for field in self._messages:
            self._messages[field] = ""

    def has_error(self, field: str) -> bool:
        return bool(self._messages.get(field))

    @property
    def validation_messages(self) -> str:
        return "".join(
            f"{message}\n" for message in self._messages.values() if message
        )
