from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a single provider send call"""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        """True only when the provider accepted the message and returned an id"""
        return self.success and bool(self.message_id)

    @classmethod
    def failed(cls, error: str) -> "DeliveryResult":
        return cls(success=False, message_id=None, error=error)
