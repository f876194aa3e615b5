"""play.ht API package — async HTTP interface to the conversion service.

WHY: Submitting a conversion and checking on it are the only two API calls
the pipeline makes. This package hides play.ht's headers and payloads
behind ConversionClient, and all raw HTTP behind Transport.

RULES:
- All HTTP calls go through Transport (no direct httpx usage elsewhere)
- Response data is parsed into the dataclasses defined in models.py
"""

from playht_converter.api.client import ConversionClient
from playht_converter.api.models import (
    ConversionHandle,
    ConversionRequest,
    ConversionStatus,
    StatusKind,
)
from playht_converter.api.transport import Transport

__all__ = [
    "ConversionClient",
    "ConversionHandle",
    "ConversionRequest",
    "ConversionStatus",
    "StatusKind",
    "Transport",
]
