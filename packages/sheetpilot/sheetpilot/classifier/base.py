"""Classifier layer — strategy interface.

The pipeline only depends on this interface, so the keyword rules can be
swapped for a remote service (or, later, a learned model) without touching
the controller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sheetpilot.protocol.actions import Action


class IntentClassifier(ABC):
    """Maps free text to exactly one Action."""

    name: str = ""

    @abstractmethod
    async def classify(self, text: str) -> Action:
        """Return the Action for *text*.

        Callers must reject empty input before calling.  Implementations
        answer ``Unsupported`` rather than raising for text they do not
        understand.
        """
        ...

    async def close(self) -> None:
        """Release any held resources (HTTP connections, etc.)."""
