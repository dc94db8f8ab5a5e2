"""Text unit search collaborator."""

from l10nsync.search.client import HttpTextUnitSearcher, TextUnitSearcher
from l10nsync.search.models import (
    StatusFilter,
    TextUnitAndWordCount,
    TextUnitDTO,
    TextUnitSearcherParameters,
)

__all__ = [
    "HttpTextUnitSearcher",
    "TextUnitSearcher",
    "StatusFilter",
    "TextUnitAndWordCount",
    "TextUnitDTO",
    "TextUnitSearcherParameters",
]
