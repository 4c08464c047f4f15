import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, TypeVar, Union

from tiktok_br.schemas.listing import FilterOptions, FilterStats, TikTokListing, as_listing
from tiktok_br.services.signals import (
    BRAZIL_CURRENCY_MARKERS,
    has_brazilian_currency,
    is_brazilian_warehouse,
    pick_image_url,
    resolve_price,
)

logger = logging.getLogger(__name__)

BRAZIL_URL_MARKERS = (".br/", "/br-", "brazil", "brasil")

T = TypeVar("T")
FilterObserver = Callable[[FilterStats], None]


def log_filter_stats(stats: FilterStats) -> None:
    logger.info(
        "Filter results original=%s kept=%s filtered_out=%s",
        stats.original,
        stats.kept,
        stats.filtered_out,
    )
    if stats.require_brazil_signals and stats.filtered_out > 0:
        logger.info("Filtered out %s items without Brazil signals", stats.filtered_out)


def _has_brazil_urls(payload: Any) -> bool:
    if not payload:
        return False
    try:
        text = json.dumps(payload, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        text = str(payload)
    text = text.lower()
    return any(marker in text for marker in BRAZIL_URL_MARKERS)


def has_brazil_signals(listing: TikTokListing) -> bool:
    if has_brazilian_currency(listing.format_price, listing.currency):
        return True
    if is_brazilian_warehouse(listing.warehouse_region):
        return True
    return _has_brazil_urls(listing.schema_) or _has_brazil_urls(listing.view_in_shop_button)


def has_valid_image(listing: TikTokListing) -> bool:
    return pick_image_url(listing.cover, listing.img) is not None


def _declares_foreign_currency(listing: TikTokListing) -> bool:
    currency = (listing.currency or "").strip().upper()
    return bool(currency) and currency not in BRAZIL_CURRENCY_MARKERS


def is_price_in_range(
    listing: TikTokListing, min_price: Optional[float] = None, max_price: Optional[float] = None
) -> bool:
    if min_price is None and max_price is None:
        return True

    # A foreign price cannot be compared against BRL bounds, parsed or not.
    if not has_brazil_signals(listing) and _declares_foreign_currency(listing):
        return False

    price = resolve_price(listing.floor_price, listing.ceiling_price, listing.format_price)
    if price <= 0:
        return True
    if min_price is not None and price < min_price:
        return False
    if max_price is not None and price > max_price:
        return False
    return True


def _admits(listing: TikTokListing, options: FilterOptions) -> bool:
    if options.require_brazil_signals and not has_brazil_signals(listing):
        return False
    if options.drop_if_no_image and not has_valid_image(listing):
        return False
    return is_price_in_range(listing, options.min_price, options.max_price)


def filter_brazil(
    listings: Iterable[T],
    options: Union[FilterOptions, Mapping, None] = None,
    observer: Optional[FilterObserver] = log_filter_stats,
) -> List[T]:
    """Keep the listings that pass the admission policy, in input order.

    The caller's own objects are returned; plain mappings are validated into
    a ``TikTokListing`` only to run the checks.
    """
    if isinstance(options, Mapping):
        options = FilterOptions.model_validate(options)
    options = options or FilterOptions()
    items = list(listings)

    filtered = [item for item in items if _admits(as_listing(item), options)]

    if observer is not None:
        observer(
            FilterStats(
                original=len(items),
                kept=len(filtered),
                filtered_out=len(items) - len(filtered),
                require_brazil_signals=options.require_brazil_signals,
            )
        )
    return filtered
