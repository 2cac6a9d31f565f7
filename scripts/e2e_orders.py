#!/usr/bin/env python3
"""
End-to-end smoke run against a live order service.

Run:
  python scripts/e2e_orders.py

Optional env:
  ORDER_BASE=http://localhost:8080
  DEBUG=1
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests


# =========================
# Simple CLI UI (ANSI)
# =========================

class Style:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


def section_title(text: str):
    print(f"\n{Style.BLUE}{Style.BOLD}== {text} =={Style.RESET}")


def info(msg: str):
    print(f"{Style.CYAN}ℹ {msg}{Style.RESET}")


def ok(msg: str):
    print(f"{Style.GREEN}✔ {msg}{Style.RESET}")


def fail(msg: str):
    print(f"{Style.RED}✘ {msg}{Style.RESET}")


# =========================
# Config
# =========================

ORDER_BASE = os.getenv("ORDER_BASE", "http://localhost:8080")
DEBUG = os.getenv("DEBUG", "0").strip() in {"1", "true", "True", "YES", "yes"}

ORDERS_PATH = "/orders"
ORDER_PATH = "/orders/{order_id}"

ORDER_PAYLOAD = {
    "customerName": "Alice",
    "orderedAt": "2024-01-15T09:30:00+00:00",
    "items": [{"itemCode": "A1", "description": "Widget", "quantity": 3}],
}


def debug(msg: str):
    if DEBUG:
        print(f"{Style.GRAY}… {msg}{Style.RESET}")


@dataclass
class CheckResult:
    name: str
    success: bool
    details: str = ""


# =========================
# HTTP helpers
# =========================

def http(method: str, path: str, **kwargs) -> requests.Response:
    kwargs.setdefault("timeout", 8)
    url = ORDER_BASE + path
    debug(f"{method} {url} kwargs={kwargs}")
    return requests.request(method, url, **kwargs)


def assert_status(resp: requests.Response, expected: int, ctx: str):
    if resp.status_code != expected:
        raise AssertionError(f"{ctx}: expected HTTP {expected}, got {resp.status_code}, body={resp.text}")


def find_order(order_id: int) -> Optional[Dict[str, Any]]:
    resp = http("GET", ORDERS_PATH)
    assert_status(resp, 200, "GET orders")
    return next((o for o in resp.json() if o["orderId"] == order_id), None)


# =========================
# Scenarios
# =========================

def check_lifecycle() -> CheckResult:
    section_title("Create / Replace / Delete")
    try:
        resp = http("POST", ORDERS_PATH, json=ORDER_PAYLOAD)
        assert_status(resp, 201, "POST order")
        order_id = resp.json()["orderId"]
        info(f"Created order {order_id}")

        order = find_order(order_id)
        codes = [i["itemCode"] for i in order["items"]] if order else None
        if codes != ["A1"]:
            raise AssertionError(f"expected items ['A1'] after create, got {codes}")
        ok("Order listed with its item")

        replacement = {**ORDER_PAYLOAD, "items": [{"itemCode": "B1", "description": "Bolt", "quantity": 1}]}
        assert_status(http("PUT", ORDER_PATH.format(order_id=order_id), json=replacement), 200, "PUT order")
        codes = [i["itemCode"] for i in find_order(order_id)["items"]]
        if codes != ["B1"]:
            raise AssertionError(f"expected items ['B1'] after replace, got {codes}")
        ok("Replace swapped the item set")

        assert_status(http("DELETE", ORDER_PATH.format(order_id=order_id)), 200, "DELETE order")
        assert_status(http("DELETE", ORDER_PATH.format(order_id=order_id)), 404, "DELETE order again")
        if find_order(order_id) is not None:
            raise AssertionError("order still listed after delete")
        ok("Delete removed the order; second delete is 404")
        return CheckResult("Lifecycle", True)
    except Exception as e:
        fail(str(e))
        return CheckResult("Lifecycle", False, str(e))


def check_empty_items() -> CheckResult:
    section_title("Order Without Items")
    try:
        resp = http("POST", ORDERS_PATH, json={**ORDER_PAYLOAD, "items": []})
        assert_status(resp, 201, "POST order")
        order_id = resp.json()["orderId"]
        order = find_order(order_id)
        if order is None or order["items"] != []:
            raise AssertionError(f"expected empty items array, got {order}")
        ok("Empty order listed with items: []")
        http("DELETE", ORDER_PATH.format(order_id=order_id))
        return CheckResult("Empty items", True)
    except Exception as e:
        fail(str(e))
        return CheckResult("Empty items", False, str(e))


def check_missing_order() -> CheckResult:
    section_title("Missing Order")
    try:
        assert_status(http("DELETE", ORDER_PATH.format(order_id=999999)), 404, "DELETE unknown")
        assert_status(http("PUT", ORDER_PATH.format(order_id=999999), json=ORDER_PAYLOAD), 404, "PUT unknown")
        ok("Unknown order ids report 404")
        return CheckResult("Missing order", True)
    except Exception as e:
        fail(str(e))
        return CheckResult("Missing order", False, str(e))


def main() -> int:
    results: List[CheckResult] = [check_lifecycle(), check_empty_items(), check_missing_order()]

    section_title("Summary")
    for r in results:
        (ok if r.success else fail)(f"{r.name}{': ' + r.details if r.details else ''}")
    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
