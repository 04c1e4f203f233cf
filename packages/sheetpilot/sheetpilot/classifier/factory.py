"""Build the configured classifier strategy."""

from __future__ import annotations

from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.classifier.http import HttpClassifier
from sheetpilot.classifier.rules import RuleBasedClassifier
from sheetpilot.config import ClassifierConfig


def build_classifier(cfg: ClassifierConfig) -> IntentClassifier:
    if cfg.backend == "http":
        return HttpClassifier(cfg.url, timeout=cfg.timeout_seconds)
    return RuleBasedClassifier()
