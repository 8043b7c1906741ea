from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from playwright.async_api import TimeoutError as PWTimeout

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

ART = ROOT / "artifacts"
ART.mkdir(exist_ok=True)

load_dotenv(ROOT / ".env")

from validators.models import NAME_DISPLAY_LEN, PricedItem
from validators.price_helper import extract_price, format_price, parse_price

BASE_URL = (os.getenv("FLIPKART_BASE_URL") or "https://www.flipkart.com").rstrip("/")
HEADLESS = os.getenv("FLIPKART_HEADLESS", "0") == "1"
CHANNEL = (os.getenv("FLIPKART_CHANNEL") or "chrome").strip()
USE_CDP = os.getenv("FLIPKART_USE_CDP", "0") == "1"
CDP_ENDPOINT = os.getenv("FLIPKART_CDP_ENDPOINT", "http://127.0.0.1:9222")

TIMEOUT_MS = int(os.getenv("FLIPKART_TIMEOUT_MS", "30000"))
NAV_TIMEOUT_MS = int(os.getenv("FLIPKART_NAV_TIMEOUT_MS", "60000"))

LAUNCH_ARGS = ["--incognito", "--start-maximized", "--disable-blink-features=AutomationControlled"]

# --- selectors ---
SEARCH_BOX = 'input[name="q"]'
SEARCH_BUTTON = 'button[type="submit"]'
LOGIN_POPUP_CLOSE = 'button._2KpZ6l._2doB4z, span[role="button"]:has-text("✕"), button:has-text("✕")'

SORT_OPTION = "div._10UF8M, div.sHCOk2"
PRODUCT_CARD = "div[data-id], div._1AtVbE > div"
CARD_TITLE = "div._4rR01T, a.s1Q9rs, a.IRpwTa, a.WKTcLC"
CARD_PRICE = "div._30jeq3"
PRODUCT_LINK = "a._1fQZEK, a.s1Q9rs, a.CGtC98, a._2rpwqI"
NEXT_PAGE = "a._1LKTO3, a._9QVEpD"

PRODUCT_TITLE = "span.B_NuCI, h1._9E25nV, span.VU-ZEz"
PRODUCT_PRICE = "div._30jeq3._16Jk6d, div._30jeq3"
SIZE_OPTION = 'a._1fGeJ5._3V2wfe, a._3V2wfe, a[class*="size"]'
ADD_TO_CART = 'button:has-text("Add to cart"), button:has-text("ADD TO CART")'
ADD_TO_CART_ALT = 'button._2KpZ6l._2U9uOA, button[class*="add-to-cart"]'

CART_NAME = "a._2Kn22P, a.s1Q9rs, div._36ESq6"
CART_PRICE = "div._3fSRat span._2-ut7f, div._30jeq3._1_WHN1"
CART_TOTAL = "div._3dqZjq span._2-ut7f, div._2Tpdn3 span._2-ut7f"
CART_TOTAL_ROW = 'div:has-text("Total Amount") span._2-ut7f'
CART_EMPTY = 'div:has-text("Your cart is empty"), div:has-text("Missing Cart items")'
CART_REMOVE = 'div._1u3nMK, div[role="button"]:text-is("Remove"), button:text-is("Remove")'

logger = logging.getLogger(__name__)


async def _text(loc) -> str:
    return ((await loc.text_content()) or "").strip()


async def connect(p):
    if USE_CDP:
        browser = await p.chromium.connect_over_cdp(CDP_ENDPOINT)
        context = browser.contexts[0] if browser.contexts else await browser.new_context()
        page = context.pages[0] if context.pages else await context.new_page()
    else:
        browser = await p.chromium.launch(
            headless=HEADLESS,
            channel=CHANNEL or None,
            args=LAUNCH_ARGS,
        )
        context = await browser.new_context(no_viewport=True, base_url=BASE_URL)
        page = await context.new_page()

    context.set_default_timeout(TIMEOUT_MS)
    context.set_default_navigation_timeout(NAV_TIMEOUT_MS)
    return browser, context, page


async def close(browser, context) -> None:
    # In CDP mode the browser belongs to the user
    if USE_CDP:
        return
    for obj in (context, browser):
        if obj is None:
            continue
        try:
            await obj.close()
        except Exception as e:
            logger.debug("close failed: %s", e)


async def save_failure_artifacts(page, prefix: str) -> None:
    try:
        (ART / f"{prefix}.html").write_text(await page.content(), encoding="utf-8")
        await page.screenshot(path=str(ART / f"{prefix}.png"), full_page=True)
    except Exception as e:
        logger.warning("Could not save artifacts %s: %s", prefix, e)


# --- home / search ---


async def dismiss_login_popup(page) -> None:
    try:
        await page.locator(LOGIN_POPUP_CLOSE).first.click(timeout=5000)
        logger.info("Login popup closed")
    except PWTimeout:
        logger.info("No login popup detected")


async def open_home(page) -> bool:
    await page.goto(f"{BASE_URL}/", wait_until="domcontentloaded")
    await dismiss_login_popup(page)
    try:
        await page.wait_for_selector(SEARCH_BOX, state="visible", timeout=10000)
        return True
    except PWTimeout:
        return False


async def search(page, term: str) -> None:
    box = page.locator(SEARCH_BOX).first
    await box.wait_for(state="visible")
    await box.fill("")
    await box.fill(term)
    await page.locator(SEARCH_BUTTON).first.click()
    await page.wait_for_load_state("domcontentloaded")


async def apply_sort(page, sort_option: str) -> None:
    await page.wait_for_timeout(2000)
    await page.locator(SORT_OPTION).filter(has_text=sort_option).first.click()
    await page.wait_for_timeout(3000)
    await page.wait_for_load_state("domcontentloaded")


# --- listing ---


async def read_listing_products(page) -> List[PricedItem]:
    """Name + price of every card on the current results page; cards without a parsable price are skipped."""
    await page.wait_for_timeout(2000)
    cards = page.locator(PRODUCT_CARD)
    products: List[PricedItem] = []
    for i in range(await cards.count()):
        card = cards.nth(i)
        try:
            title_loc = card.locator(CARD_TITLE)
            price_loc = card.locator(CARD_PRICE)
            if await title_loc.count() == 0 or await price_loc.count() == 0:
                continue
            title = await _text(title_loc.first)
            price_text = await _text(price_loc.first)
        except PWTimeout:
            continue
        price = parse_price(price_text)
        if title and price:
            products.append(PricedItem(name=title[:NAME_DISPLAY_LEN], price=price, raw_price_text=price_text))
    return products


async def results_displayed(page) -> bool:
    await page.wait_for_timeout(2000)
    prices = page.locator(CARD_PRICE)
    for i in range(await prices.count()):
        if extract_price(await prices.nth(i).text_content()) > 0:
            return True
    return False


async def go_to_next_page(page) -> bool:
    nxt = page.locator(NEXT_PAGE).filter(has_text="Next").first
    try:
        if not await nxt.is_visible():
            return False
        await nxt.click()
    except PWTimeout as e:
        logger.warning("Could not navigate to next page: %s", e)
        return False
    await page.wait_for_timeout(3000)
    await page.wait_for_load_state("domcontentloaded")
    return True


async def collect_products_from_pages(page, page_limit: int) -> List[PricedItem]:
    all_products: List[PricedItem] = []
    for n in range(1, page_limit + 1):
        products = await read_listing_products(page)
        all_products.extend(products)
        print(f"  page {n}: {len(products)} products")

        if n < page_limit and not await go_to_next_page(page):
            print(f"  could not navigate to page {n + 1}, stopping")
            break
    return all_products


async def product_links(page) -> list:
    links = page.locator(PRODUCT_LINK)
    out = []
    for i in range(await links.count()):
        href = await links.nth(i).get_attribute("href")
        if href and "/p/" in href:
            out.append(links.nth(i))
    return out


async def open_product_in_new_tab(page, position: int):
    links = await product_links(page)
    if len(links) < position:
        raise RuntimeError(f"Could not click on product at position {position}: only {len(links)} links")
    async with page.context.expect_page() as new_page_info:
        await links[position - 1].click()
    new_page = await new_page_info.value
    await new_page.wait_for_load_state("domcontentloaded")
    return new_page


# --- product page ---


async def read_product_details(page) -> PricedItem:
    await page.wait_for_timeout(2000)
    name = ""
    price_text = ""
    title_loc = page.locator(PRODUCT_TITLE)
    if await title_loc.count() > 0:
        name = await _text(title_loc.first)
    price_loc = page.locator(PRODUCT_PRICE)
    if await price_loc.count() > 0:
        price_text = await _text(price_loc.first)
    return PricedItem(name=name, price=parse_price(price_text), raw_price_text=price_text)


async def select_size_if_available(page) -> None:
    sizes = page.locator(SIZE_OPTION)
    if await sizes.count() == 0:
        return
    try:
        await sizes.first.click(timeout=5000)
        await page.wait_for_timeout(1000)
        logger.info("Size selected")
    except PWTimeout:
        logger.info("Size option not clickable, continuing")


async def add_to_cart(page) -> bool:
    await page.wait_for_timeout(2000)
    await select_size_if_available(page)

    for sel, timeout in ((ADD_TO_CART, 10000), (ADD_TO_CART_ALT, 5000)):
        btn = page.locator(sel).first
        try:
            await btn.wait_for(state="visible", timeout=timeout)
            await btn.click()
        except PWTimeout:
            logger.info("Add to cart button not found: %s", sel)
            continue
        await page.wait_for_timeout(3000)
        return True
    return False


# --- cart ---


async def goto_cart(page) -> None:
    await page.goto(f"{BASE_URL}/viewcart", wait_until="domcontentloaded")
    await page.wait_for_timeout(3000)


async def is_cart_empty(page, items: Optional[List[PricedItem]] = None) -> bool:
    if await page.locator(CART_EMPTY).first.is_visible():
        return True
    if items is None:
        items = await read_cart_items(page)
    return not items


async def read_cart_items(page) -> List[PricedItem]:
    await page.wait_for_timeout(2000)
    names = page.locator(CART_NAME)
    prices = page.locator(CART_PRICE)
    name_count = await names.count()
    price_count = await prices.count()

    items: List[PricedItem] = []
    for i in range(name_count):
        name = await _text(names.nth(i))
        price_text = await _text(prices.nth(i)) if i < price_count else ""
        if name:
            items.append(PricedItem(name=name[:NAME_DISPLAY_LEN], price=parse_price(price_text), raw_price_text=price_text))
    return items


async def read_cart_total(page) -> float:
    total = page.locator(CART_TOTAL).last
    try:
        if await total.count() > 0 and await total.is_visible():
            return extract_price(await total.text_content())
    except PWTimeout:
        pass

    row = page.locator(CART_TOTAL_ROW)
    if await row.count() > 0:
        return extract_price(await row.last.text_content())
    logger.warning("Could not read cart total")
    return 0.0


async def clear_cart(page) -> int:
    removed = 0
    remove_btns = page.locator(CART_REMOVE)
    for _ in range(50):
        if await remove_btns.count() == 0:
            break
        try:
            await remove_btns.first.click(timeout=5000)
        except PWTimeout:
            break
        removed += 1
        await page.wait_for_timeout(2000)
    return removed


def print_items(title: str, items: List[PricedItem], start: int = 1, note: Optional[str] = None) -> None:
    print("=" * 60)
    print(title)
    print("=" * 60)
    if not items:
        print("  <empty>")
    for idx, it in enumerate(items, start=start):
        print(f"  {idx}. {it.name} - {format_price(it.amount)}")
    if note:
        print(f"  {note}")
