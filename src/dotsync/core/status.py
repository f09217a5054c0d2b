"""
The status value every dotsync operation ends with.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Status:
    """Final, human-readable result of one operation."""
    text: str
    success: bool = True

    @classmethod
    def ok(cls, text: str) -> 'Status':
        return cls(text, True)

    @classmethod
    def failed(cls, text: str) -> 'Status':
        return cls(text, False)

    def __str__(self) -> str:
        return self.text
