"""Abstract base class for JSON sources."""

from abc import ABC, abstractmethod


class JsonSource(ABC):
    @abstractmethod
    def get_paginated(self, path: str) -> list[dict]:
        """Return every item of a list endpoint, following pagination until exhausted."""
