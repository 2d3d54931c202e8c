"""Product normalisation: assemble extracted fields into a :class:`ProductRecord`."""

import logging

from bs4 import Tag

from app.models.events import Fatal, FragmentOutcome, Ok, Skipped
from app.models.product import ProductRecord
from app.models.sync_config import SyncConfig
from app.services.errors import MalformedProductError, MissingIdentifierError
from app.services.extractor import (
    extract_description,
    extract_image_url,
    extract_price_amount,
    extract_product_url,
    extract_title,
    parse_external_id,
)

logger = logging.getLogger(__name__)


def normalize(fragment: Tag, config: SyncConfig) -> ProductRecord:
    """Build a :class:`ProductRecord` from one product card.

    The identifier may come back as *None*; every other field raises
    :class:`MalformedProductError` when its element is missing.
    """
    product_url = extract_product_url(fragment)
    external_id = parse_external_id(product_url)
    return ProductRecord(
        external_id=external_id,
        title=extract_title(fragment),
        description=extract_description(fragment),
        product_url=product_url,
        image_asset_key=external_id,
        image_source_url=extract_image_url(fragment),
        category=config.category,
        price_amount=extract_price_amount(fragment),
        price_currency=config.currency,
    )


def classify_fragment(fragment: Tag, config: SyncConfig) -> FragmentOutcome:
    """Normalise *fragment* and decide whether it should be persisted.

    Returns :class:`Ok` with the record, :class:`Skipped` with a reason, or
    :class:`Fatal` with the error that must abort the run.
    """
    try:
        record = normalize(fragment, config)
    except MalformedProductError as exc:
        if config.skip_malformed:
            logger.warning("Normalizer: skipping malformed product card – %s", exc)
            return Skipped(f"malformed product card: {exc}")
        return Fatal(exc)

    if record.external_id is None:
        if config.missing_id_policy == "fail":
            return Fatal(
                MissingIdentifierError(
                    f"No trailing identifier in product URL {record.product_url!r}."
                )
            )
        if config.missing_id_policy == "skip":
            logger.warning(
                "Normalizer: skipping product without identifier – %s", record.product_url
            )
            return Skipped(f"no identifier in {record.product_url}")

    return Ok(record)
