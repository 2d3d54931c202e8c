"""Field extractors: one product card in, one typed field out.

Every extractor follows a single fixed selector path.  When an element on that
path is missing the card is malformed and :class:`MalformedProductError` is
raised; there are no fallback selectors.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional
from urllib.parse import urlparse

from bs4 import Tag

from app.services.errors import MalformedProductError, PriceFormatError

# Trailing "/<digits>" at the end of a product detail path
_EXTERNAL_ID_RE = re.compile(r"/(\d+)$")

# Currency glyphs, thousands separators and whitespace dropped before parsing a price
_PRICE_NOISE_RE = re.compile(r"&euro;|&pound;|&#8364;|[€£$,\s]", re.IGNORECASE)

_DESCRIPTION_SELECTOR = "ul.result-list-item-desc-list"


def _first(node: Tag, selector: str) -> Tag:
    """Return the first element under *node* matching *selector*, or raise."""
    found = node.select_one(selector)
    if found is None:
        raise MalformedProductError(f"Product card has no '{selector}' element.")
    return found


def _title_anchor(fragment: Tag) -> Tag:
    return _first(_first(fragment, "h4"), "a")


def extract_product_url(fragment: Tag) -> str:
    href = _title_anchor(fragment).get("href")
    if not href:
        raise MalformedProductError("Product title link has no href.")
    return str(href).strip()


def parse_external_id(product_url: str) -> Optional[str]:
    """Return the trailing run of digits in the path of *product_url*, or *None*."""
    match = _EXTERNAL_ID_RE.search(urlparse(product_url).path)
    return match.group(1) if match else None


def extract_external_id(fragment: Tag) -> Optional[str]:
    return parse_external_id(extract_product_url(fragment))


def extract_title(fragment: Tag) -> str:
    """Inner markup of the title link; nested tags are kept as markup."""
    return _title_anchor(fragment).decode_contents().strip()


def wrap_description(inner_html: str) -> str:
    """Wrap list items in a single ``<ul>`` shell; empty input stays ``""``."""
    inner_html = inner_html.strip()
    return f"<ul>{inner_html}</ul>" if inner_html else ""


def extract_description(fragment: Tag) -> str:
    return wrap_description(_first(fragment, _DESCRIPTION_SELECTOR).decode_contents())


def extract_image_url(fragment: Tag) -> str:
    img = _first(_first(fragment, "div.product-image"), "img.img-responsive")
    src = img.get("src")
    if not src:
        raise MalformedProductError("Product image has no src.")
    return str(src).strip()


def parse_price_amount(raw: str) -> int:
    """Convert a displayed price such as ``"€1,234.50"`` into integer cents.

    Rounds half away from zero to the nearest cent.
    """
    cleaned = _PRICE_NOISE_RE.sub("", raw)
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise PriceFormatError(f"Price {raw!r} is not a decimal number.") from None
    if not amount.is_finite() or amount < 0:
        raise PriceFormatError(f"Price {raw!r} is not a non-negative amount.")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def extract_price_amount(fragment: Tag) -> int:
    return parse_price_amount(_first(fragment, "h3").get_text())
