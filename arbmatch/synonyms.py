import json
from pathlib import Path
from typing import Dict, FrozenSet, List

_DATA_PATH = Path(__file__).resolve().parent / "data" / "synonyms.json"

if not _DATA_PATH.exists():
    raise FileNotFoundError(f"Missing synonym table: {_DATA_PATH}")

SYNONYM_GROUPS: List[List[str]] = [
    [term.lower() for term in group]
    for group in json.loads(_DATA_PATH.read_text(encoding="utf-8"))
]


def _build_lookup(groups: List[List[str]]) -> Dict[str, FrozenSet[str]]:
    # A term listed in several groups is a synonym of every member of each.
    lookup: Dict[str, set] = {}
    for group in groups:
        for term in group:
            lookup.setdefault(term, set()).update(group)
    return {term: frozenset(members) for term, members in lookup.items()}


_LOOKUP = _build_lookup(SYNONYM_GROUPS)


def are_synonyms(term_a: str, term_b: str) -> bool:
    lowered_a = term_a.lower()
    lowered_b = term_b.lower()
    if lowered_a == lowered_b:
        return True
    return lowered_b in _LOOKUP.get(lowered_a, frozenset())
