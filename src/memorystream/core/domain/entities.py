"""Pattern-based entity extraction.

A lightweight, non-exhaustive scan for emails, URLs and dates. There is no
NLP here; the hints are stored unencrypted next to the ciphertext so they can
be shown in listings without decrypting anything.
"""

from __future__ import annotations

import re

from memorystream.core.domain.memory import ExtractedEntities

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
URL_PATTERN = re.compile(r"https?://\S+")
DATE_PATTERN = re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b|\b\d{4}-\d{2}-\d{2}\b")


class EntityExtractor:
    """Extract emails, URLs and dates from raw text."""

    def extract(self, text: str) -> ExtractedEntities:
        if not text:
            return ExtractedEntities()
        return ExtractedEntities(
            emails=tuple(EMAIL_PATTERN.findall(text)),
            urls=tuple(URL_PATTERN.findall(text)),
            dates=tuple(DATE_PATTERN.findall(text)),
        )
