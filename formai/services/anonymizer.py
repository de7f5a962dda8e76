"""
Text anonymization for data exported to AI providers.

Levels are cumulative:
    basic     emails, phone numbers, SSNs -> [REDACTED]; URLs -> [URL]
    standard  basic + company and person-like names -> [REDACTED];
              money amounts and long numbers -> [BUSINESS_INFO]
    strict    standard + dates and times -> [TIMESTAMP]
Masked keywords are replaced with [KEYWORD] at every level.
"""
import re
from typing import List, Optional

LEVELS = ("basic", "standard", "strict")

URL = re.compile(r"https?://\S+")
EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
SSN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
PHONE = re.compile(r"(?:\+?\d{1,2}[\s.-]?)?\(?\b\d{3}\)?[\s.-]?\d{3}[\s.-]\d{4}\b")

COMPANY = re.compile(r"\b[A-Z][a-z]+ (?:Inc|LLC|Corp|Company|Ltd)\b\.?")
PERSON_NAME = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")
MONEY = re.compile(r"\$\d+(?:,\d{3})*(?:\.\d{2})?\b")
LONG_NUMBER = re.compile(r"\b\d{4,}\b")

ISO_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}(?::\d{2})?(?:\.\d+)?Z?)?\b")
TIME = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?\b")
DATE_STRING = re.compile(
    r"\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]* \d{1,2},? \d{4}\b"
)

REDACTED = "[REDACTED]"
BUSINESS_INFO = "[BUSINESS_INFO]"
TIMESTAMP = "[TIMESTAMP]"


class Anonymizer:
    """Applies the replacement rules of one level to free text."""

    def __init__(self, level: str = "standard", masked_keywords: Optional[List[str]] = None):
        if level not in LEVELS:
            raise ValueError(f"Unknown anonymization level '{level}'")
        self.level = level
        self.keyword_patterns = [
            re.compile(rf"\b{re.escape(k.strip())}\b", re.IGNORECASE)
            for k in masked_keywords or []
            if k and k.strip()
        ]

    def anonymize(self, text: Optional[str]) -> Optional[str]:
        if not text:
            return text

        # URLs first so their digits and names are not matched piecemeal
        text = URL.sub("[URL]", text)
        text = EMAIL.sub(REDACTED, text)
        text = SSN.sub(REDACTED, text)
        text = PHONE.sub(REDACTED, text)

        if self.level == "strict":
            text = ISO_DATE.sub(TIMESTAMP, text)
            text = DATE_STRING.sub(TIMESTAMP, text)
            text = TIME.sub(TIMESTAMP, text)

        if self.level in ("standard", "strict"):
            text = COMPANY.sub(REDACTED, text)
            text = PERSON_NAME.sub(REDACTED, text)
            text = MONEY.sub(BUSINESS_INFO, text)
            text = LONG_NUMBER.sub(BUSINESS_INFO, text)

        for pattern in self.keyword_patterns:
            text = pattern.sub("[KEYWORD]", text)
        return text

    def anonymize_record(self, record: dict, fields: List[str]) -> dict:
        """Copy of `record` with the given text fields anonymized."""
        cleaned = dict(record)
        for field in fields:
            if isinstance(cleaned.get(field), str):
                cleaned[field] = self.anonymize(cleaned[field])
        return cleaned
