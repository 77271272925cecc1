# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Correlation of discovered entities against threat intelligence."""

from sandworm.detection.classifier import Classifier, FindingCollector

__all__ = ["Classifier", "FindingCollector"]
