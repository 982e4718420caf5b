"""Keyword-based suggestion of which columns hold which transaction fields."""

from typing import Optional, Sequence

from finport.domain import errors
from finport.domain.entities import ColumnMapping

# Order matters: earlier keywords win over later ones regardless of where
# the matching header sits in the file.
DATE_KEYWORDS = ("data", "date", "dt", "dia")
DESCRIPTION_KEYWORDS = (
    "descrição",
    "descricao",
    "description",
    "histórico",
    "historico",
    "memo",
    "lançamento",
    "lancamento",
)
AMOUNT_KEYWORDS = ("valor", "amount", "value", "montante", "quantia")
CATEGORY_KEYWORDS = ("categoria", "category")
KIND_KEYWORDS = ("tipo", "type", "natureza", "d/c")


def match_header(
    headers: Sequence[str], keywords: Sequence[str], taken: frozenset[str] = frozenset()
) -> Optional[str]:
    """Return the first header containing a keyword, honouring keyword order.

    Matching is case-insensitive on trimmed header text. Headers in
    ``taken`` are never returned.
    """
    lowered = [(header, header.strip().lower()) for header in headers if header not in taken]
    for keyword in keywords:
        for header, text in lowered:
            if keyword in text:
                return header
    return None


def suggest_mapping(headers: Sequence[str]) -> ColumnMapping:
    """Suggest a column mapping for the given headers.

    The suggestion is advisory only; callers may override any column.
    """
    taken: set[str] = set()
    found: dict[str, Optional[str]] = {}
    for field_name, keywords in (
        ("date", DATE_KEYWORDS),
        ("description", DESCRIPTION_KEYWORDS),
        ("amount", AMOUNT_KEYWORDS),
        ("category", CATEGORY_KEYWORDS),
        ("kind", KIND_KEYWORDS),
    ):
        header = match_header(headers, keywords, frozenset(taken))
        if header is not None:
            taken.add(header)
        found[field_name] = header
    return ColumnMapping(**found)


def validate_mapping(mapping: ColumnMapping, headers: Sequence[str]) -> None:
    """Ensure a mapping is complete and only names existing headers.

    Raises:
        MappingError: If a required column is unmapped or a mapped column
            does not exist
    """
    missing = mapping.required_missing()
    if missing:
        raise errors.MappingError(errors.missing_mapping(missing))

    unknown = mapping.missing_from(list(headers))
    if unknown:
        raise errors.MappingError(errors.unknown_columns(unknown))
