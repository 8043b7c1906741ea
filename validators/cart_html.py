from __future__ import annotations

import re
from html.parser import HTMLParser
from typing import Dict, List, Optional, Set

from validators.models import NAME_DISPLAY_LEN, PricedItem
from validators.price_helper import extract_price, parse_price

NAME_CLASSES = {"_2Kn22P", "s1Q9rs", "_36ESq6"}
# price row of a cart line: div._3fSRat span._2-ut7f or div._30jeq3._1_WHN1
PRICE_WRAPPER_CLASS = "_3fSRat"
PRICE_SPAN_CLASS = "_2-ut7f"
PRICE_DIV_CLASSES = {"_30jeq3", "_1_WHN1"}
TOTAL_WRAPPER_CLASSES = {"_3dqZjq", "_2Tpdn3"}


class _CartHTMLParser(HTMLParser):
    def __init__(self):
        super().__init__()
        # one entry per open tag: (tag, classes, capture or None, element id)
        self.stack: List[tuple] = []
        self.open_captures: List[dict] = []
        self.names: List[dict] = []
        self.prices: List[dict] = []
        self.totals: List[str] = []
        self._next_id = 0

    @staticmethod
    def _classes(attrs) -> Set[str]:
        out: Dict[str, str] = {}
        for k, v in attrs:
            out[(k or "").lower()] = v or ""
        return set(out.get("class", "").split())

    def _inside(self, cls: str) -> bool:
        return any(cls in entry[1] for entry in self.stack)

    def _inside_any(self, wanted: Set[str]) -> bool:
        return any(entry[1] & wanted for entry in self.stack)

    def _capture_kind(self, tag: str, classes: Set[str]) -> Optional[str]:
        if tag in {"a", "div"} and classes & NAME_CLASSES:
            return "name"
        if tag == "span" and PRICE_SPAN_CLASS in classes:
            if self._inside_any(TOTAL_WRAPPER_CLASSES):
                return "total"
            if self._inside(PRICE_WRAPPER_CLASS):
                return "price"
        if tag == "div" and PRICE_DIV_CLASSES <= classes:
            return "price"
        return None

    def handle_starttag(self, tag, attrs):
        classes = self._classes(attrs)
        kind = self._capture_kind(tag, classes)
        self._next_id += 1
        cap = None
        if kind:
            cap = {
                "kind": kind,
                "text": [],
                "order": self._next_id,
                "ancestors": tuple(entry[3] for entry in self.stack),
            }
            self.open_captures.append(cap)
        self.stack.append((tag, classes, cap, self._next_id))

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)
        self.handle_endtag(tag)

    def handle_data(self, data):
        if not data:
            return
        for cap in self.open_captures:
            cap["text"].append(data)

    def handle_endtag(self, tag):
        # tolerate unclosed tags: pop back to the nearest matching open tag
        for i in range(len(self.stack) - 1, -1, -1):
            if self.stack[i][0] == tag:
                closed = self.stack[i:]
                del self.stack[i:]
                for entry in closed:
                    if entry[2] is not None:
                        self._finish(entry[2])
                return

    def _finish(self, cap: dict) -> None:
        self.open_captures.remove(cap)
        cap["text"] = re.sub(r"\s+", " ", "".join(cap["text"])).strip()
        if cap["kind"] == "total":
            self.totals.append(cap["text"])
        elif cap["kind"] == "name":
            self.names.append(cap)
        else:
            self.prices.append(cap)


def _shared_depth(a: tuple, b: tuple) -> int:
    n = 0
    for x, y in zip(a, b):
        if x != y:
            break
        n += 1
    return n


def _owner_of(price: dict, names: List[dict]) -> int:
    """Index of the name sharing the deepest container with ``price``.

    Ties go to the closest name before the price in document order.
    """
    best = max(_shared_depth(price["ancestors"], n["ancestors"]) for n in names)
    tied = [i for i, n in enumerate(names) if _shared_depth(price["ancestors"], n["ancestors"]) == best]
    before = [i for i in tied if names[i]["order"] < price["order"]]
    return before[-1] if before else tied[0]


def _parse(html: str) -> _CartHTMLParser:
    parser = _CartHTMLParser()
    parser.feed(html or "")
    parser.close()
    return parser


def parse_cart_html(html: str) -> List[PricedItem]:
    """Cart lines from a saved ``/viewcart`` page.

    Each price goes to the name it shares the innermost cart-line container
    with, so a line without a price stays unpriced instead of taking its
    neighbour's.
    """
    parser = _parse(html)
    names = [n for n in parser.names if n["text"]]
    raw_by_name: Dict[int, str] = {}
    if names:
        for price in parser.prices:
            raw_by_name.setdefault(_owner_of(price, names), price["text"])

    items: List[PricedItem] = []
    for i, name in enumerate(names):
        raw = raw_by_name.get(i, "")
        items.append(PricedItem(name=name["text"][:NAME_DISPLAY_LEN], price=parse_price(raw), raw_price_text=raw))
    return items


def parse_cart_total(html: str) -> float:
    totals = _parse(html).totals
    return extract_price(totals[-1]) if totals else 0.0
