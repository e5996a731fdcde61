"""Typed answer input, the fallback channel when speech is unavailable."""

from .recognizer import AnswerCandidate, InputSource

BACKSPACE = "Backspace"
ENTER = "Enter"


class KeypadBuffer:
    """Digit buffer edited with backspace and submitted with enter."""

    def __init__(self, max_digits: int = 3):
        self.max_digits = max_digits
        self.text = ""

    def press(self, key: str, timestamp: float) -> AnswerCandidate | None:
        """Apply one key press.

        Args:
            key: A digit, ``"Backspace"`` or ``"Enter"``; anything else is ignored
            timestamp: Race time of the key press (ms)

        Returns:
            The submitted answer when ``key`` is enter and the buffer holds digits
        """
        if len(key) == 1 and key.isascii() and key.isdigit():
            if len(self.text) < self.max_digits:
                self.text += key
        elif key == BACKSPACE:
            self.text = self.text[:-1]
        elif key == ENTER and self.text:
            candidate = AnswerCandidate(
                value=int(self.text), source=InputSource.KEYBOARD, timestamp=timestamp
            )
            self.text = ""
            return candidate
        return None

    def clear(self) -> None:
        self.text = ""
