"""Classifier layer — free text → Action strategies."""

from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.classifier.descriptions import describe
from sheetpilot.classifier.factory import build_classifier
from sheetpilot.classifier.http import HttpClassifier
from sheetpilot.classifier.rules import RuleBasedClassifier, classify_text

__all__ = [
    "IntentClassifier",
    "RuleBasedClassifier",
    "HttpClassifier",
    "build_classifier",
    "classify_text",
    "describe",
]
