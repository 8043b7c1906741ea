from __future__ import annotations

import asyncio
import logging
import os

from playwright.async_api import async_playwright

import flipkart_pages as fk
from validators.price_helper import format_price
from validators.scenario_data import load_scenario
from validators.sort_validator import validate_ascending, violation_details

SCENARIO = os.getenv("FLIPKART_SORT_SCENARIO", "sortValidation")


async def main():
    scenario = load_scenario(SCENARIO)
    print("=" * 60)
    print(f"search={scenario.search_term!r} sort={scenario.sort_option!r} pages={scenario.page_limit}")
    print("=" * 60)

    async with async_playwright() as p:
        browser = context = page = None
        try:
            browser, context, page = await fk.connect(p)

            print("[1] open home")
            if not await fk.open_home(page):
                await fk.save_failure_artifacts(page, "sort_home_not_loaded")
                raise RuntimeError("Flipkart homepage did not load (no search box).")

            print(f"[2] search {scenario.search_term!r}")
            await fk.search(page, scenario.search_term)
            if not await fk.results_displayed(page):
                await fk.save_failure_artifacts(page, "sort_no_results")
                raise RuntimeError(f"No search results for {scenario.search_term!r}.")

            print(f"[3] sort {scenario.sort_option!r}")
            await fk.apply_sort(page, scenario.sort_option)

            print(f"[4] collect products from {scenario.page_limit} page(s)")
            products = await fk.collect_products_from_pages(page, scenario.page_limit)
            fk.print_items("PRODUCTS COLLECTED", products)

            report = validate_ascending(products)
            print("=" * 60)
            print(f"Total products: {report.total_items}")
            print(f"Correctly sorted: {'YES' if report.is_sorted else 'NO'}")
            print(f"Violations: {len(report.violations)}")
            details = violation_details(report)
            for idx, line in enumerate(details, start=1):
                print(f"  [VIOLATION {idx}] {line}")
                v = report.violations[idx - 1]
                print(
                    f"    current {format_price(v.current_item.amount)} is LESS than previous "
                    f"{format_price(v.previous_item.amount)}"
                )

            if not report.is_sorted:
                await fk.save_failure_artifacts(page, "sort_validation_failed")
                raise RuntimeError(
                    f"Sort order validation failed: {len(report.violations)} product(s) out of ascending order "
                    f"across {scenario.page_limit} page(s): " + " | ".join(details)
                )

            print("OK: all products sorted by price, low to high.")
        finally:
            await fk.close(browser, context)


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
