"""Format-specific ingestors (CSV and OFX/QFX) and CSV bank profiles."""

from .csv_ingest import parse_csv_content
from .ofx_ingest import parse_ofx_content
from .profiles import KNOWN_PROFILES, BankProfile, detect_profile, infer_mapping

__all__ = [
    "KNOWN_PROFILES",
    "BankProfile",
    "detect_profile",
    "infer_mapping",
    "parse_csv_content",
    "parse_ofx_content",
]
