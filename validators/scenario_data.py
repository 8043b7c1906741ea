from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATA_FILE = ROOT / "data" / "testData.json"

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScenarioDataError(RuntimeError):
    pass


@dataclass(frozen=True)
class Scenario:
    name: str
    search_term: str
    sort_option: str
    page_limit: int = 1
    products_to_add: Tuple[int, ...] = ()


def _data_path(path: Optional[Path | str]) -> Path:
    if path:
        return Path(path)
    env = (os.getenv("FLIPKART_TEST_DATA") or "").strip()
    return Path(env) if env else DEFAULT_DATA_FILE


def _positive_int(value: Any, field: str, scenario: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ScenarioDataError(f"Scenario '{scenario}': {field} must be a positive integer, got {value!r}")
    return value


def read_test_data(path: Optional[Path | str] = None) -> Dict[str, Any]:
    p = _data_path(path)
    if not p.exists():
        raise ScenarioDataError(f"Test data file not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ScenarioDataError(f"Test data file is not valid JSON: {p}") from e
    if not isinstance(data, dict):
        raise ScenarioDataError(f"Test data root must be an object: {p}")
    return data


def load_scenario(name: str, path: Optional[Path | str] = None) -> Scenario:
    data = read_test_data(path)
    raw = data.get(name)
    if not isinstance(raw, dict):
        raise ScenarioDataError(f"Test data for scenario '{name}' not found")

    search_term = str(raw.get("searchTerm") or "").strip()
    if not search_term:
        raise ScenarioDataError(f"Scenario '{name}': searchTerm is empty")

    positions = raw.get("productsToAdd") or []
    if not isinstance(positions, list):
        raise ScenarioDataError(f"Scenario '{name}': productsToAdd must be a list")

    scenario = Scenario(
        name=name,
        search_term=search_term,
        sort_option=str(raw.get("sortOption") or "").strip(),
        page_limit=_positive_int(raw.get("pageLimit", 1), "pageLimit", name),
        products_to_add=tuple(_positive_int(p, "productsToAdd", name) for p in positions),
    )
    logger.info(
        "Loaded scenario %s: search=%r sort=%r pages=%d positions=%s",
        scenario.name,
        scenario.search_term,
        scenario.sort_option,
        scenario.page_limit,
        list(scenario.products_to_add),
    )
    return scenario


def select_by_positions(items: Sequence[T], positions: Sequence[int]) -> List[T]:
    """Pick items by 1-based positions, failing if any position is out of range."""
    out: List[T] = []
    for pos in positions:
        if pos < 1 or pos > len(items):
            raise ScenarioDataError(
                f"Product at position {pos} not found. Only {len(items)} products available."
            )
        out.append(items[pos - 1])
    return out
