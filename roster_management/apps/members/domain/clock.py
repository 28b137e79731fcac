from abc import ABC, abstractmethod
from datetime import date


class Clock(ABC):
    """Source of "today" for the promotion rules; read once per batch."""

    @abstractmethod
    def today(self) -> date:
        pass


class FixedClock(Clock):
    def __init__(self, today: date):
        self._today = today

    def today(self) -> date:
        return self._today
