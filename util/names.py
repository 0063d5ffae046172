# util/names.py
# Purpose: normalize player names from SofaScore so that user queries typed
# without accents ("joao") still line up with roster names ("João").

import unicodedata


def normalize_name(s: str) -> str:
    """Strip accents, lowercase and trim. None/empty become ""."""
    s = s or ""
    decomposed = unicodedata.normalize("NFD", s)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def names_match(roster_name: str, query: str) -> bool:
    """
    True when either normalized name contains the other.
    Lets "silva" find "João Silva" and "Joao Silva Junior" find "João Silva".
    """
    roster_key = normalize_name(roster_name)
    query_key = normalize_name(query)
    return query_key in roster_key or roster_key in query_key
