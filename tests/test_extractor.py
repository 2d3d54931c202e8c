"""Tests for the per-field product card extractors."""

import pytest
from bs4 import BeautifulSoup

from app.services.errors import MalformedProductError, PriceFormatError
from app.services.extractor import (
    extract_description,
    extract_external_id,
    extract_image_url,
    extract_price_amount,
    extract_product_url,
    extract_title,
    parse_external_id,
    parse_price_amount,
    wrap_description,
)


def _card(
    href: str = "https://www.appliancesdelivered.ie/kettles/acme-kettle/9981",
    title: str = "Acme Kettle",
    description: str = "<li>1.7 litre</li><li>Boil dry protection</li>",
    image_src: str = "https://cdn.example.com/kettle.jpg",
    price: str = "&euro;49.99",
) -> BeautifulSoup:
    html = f"""
    <div class="search-results-product">
      <div class="product-image">
        <img class="img-responsive" src="{image_src}">
      </div>
      <h4><a href="{href}">{title}</a></h4>
      <ul class="result-list-item-desc-list">{description}</ul>
      <h3>{price}</h3>
    </div>
    """
    return BeautifulSoup(html, "lxml").select_one("div.search-results-product")


# ---------------------------------------------------------------------------
# Identifier and URL
# ---------------------------------------------------------------------------

class TestExternalId:
    def test_trailing_digits_are_the_identifier(self):
        assert parse_external_id("https://example.com/product/9981") == "9981"

    def test_relative_url(self):
        assert parse_external_id("/small-appliances/toaster/42") == "42"

    def test_no_trailing_digits_is_none(self):
        assert parse_external_id("https://example.com/product/") is None

    def test_digits_not_at_end_are_ignored(self):
        assert parse_external_id("https://example.com/123/toaster") is None

    def test_query_string_does_not_hide_identifier(self):
        assert parse_external_id("https://example.com/product/77?ref=list") == "77"

    def test_extracted_from_card_link(self):
        assert extract_external_id(_card()) == "9981"

    def test_card_without_identifier(self):
        assert extract_external_id(_card(href="/kettles/acme-kettle")) is None


class TestProductUrl:
    def test_reads_href_of_title_link(self):
        assert extract_product_url(_card(href="/p/1")) == "/p/1"

    def test_missing_heading_is_malformed(self):
        card = BeautifulSoup("<div><a href='/p/1'>x</a></div>", "lxml").div
        with pytest.raises(MalformedProductError):
            extract_product_url(card)


# ---------------------------------------------------------------------------
# Title / description / image
# ---------------------------------------------------------------------------

class TestTitle:
    def test_plain_title(self):
        assert extract_title(_card(title="Acme Kettle")) == "Acme Kettle"

    def test_nested_markup_is_kept(self):
        title = extract_title(_card(title="<strong>Acme</strong> Kettle"))
        assert title == "<strong>Acme</strong> Kettle"


class TestDescription:
    def test_non_empty_is_wrapped_once(self):
        assert wrap_description("<li>A</li>") == "<ul><li>A</li></ul>"

    def test_empty_stays_empty(self):
        assert wrap_description("") == ""

    def test_whitespace_only_counts_as_empty(self):
        assert wrap_description("  \n ") == ""

    def test_from_card(self):
        assert extract_description(_card(description="<li>A</li>")) == "<ul><li>A</li></ul>"

    def test_empty_list_from_card(self):
        assert extract_description(_card(description="")) == ""

    def test_missing_list_is_malformed(self):
        card = BeautifulSoup("<div><h4><a href='/p/1'>x</a></h4></div>", "lxml").div
        with pytest.raises(MalformedProductError):
            extract_description(card)


class TestImageUrl:
    def test_reads_src(self):
        assert extract_image_url(_card(image_src="/img/1.jpg")) == "/img/1.jpg"

    def test_image_outside_container_is_malformed(self):
        card = BeautifulSoup(
            "<div><img class='img-responsive' src='/img/1.jpg'></div>", "lxml"
        ).div
        with pytest.raises(MalformedProductError):
            extract_image_url(card)


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------

class TestPrice:
    def test_euro_with_thousands_separator(self):
        assert parse_price_amount("€1,234.50") == 123450

    def test_entity_form(self):
        assert parse_price_amount("&euro;49.99") == 4999

    def test_whole_number(self):
        assert parse_price_amount("€20") == 2000

    def test_surrounding_whitespace(self):
        assert parse_price_amount("\n  €15.00 \n") == 1500

    def test_rounds_to_nearest_cent(self):
        assert parse_price_amount("€0.125") == 13
        assert parse_price_amount("€0.124") == 12

    def test_from_card(self):
        assert extract_price_amount(_card(price="&euro;1,234.50")) == 123450

    def test_non_numeric_raises(self):
        with pytest.raises(PriceFormatError):
            parse_price_amount("Call for price")

    def test_empty_raises(self):
        with pytest.raises(PriceFormatError):
            parse_price_amount("€")

    def test_negative_raises(self):
        with pytest.raises(PriceFormatError):
            parse_price_amount("-€5.00")

    def test_price_error_is_a_malformed_product_error(self):
        assert issubclass(PriceFormatError, MalformedProductError)
