from typing import Any, Callable, Optional, Sequence, TypeVar

from tiktok_br.schemas.listing import SupabaseProduct, TikTokListing, as_listing
from tiktok_br.services.signals import (
    DEFAULT_MAX_RATING,
    DEFAULT_MAX_SOLD,
    calculate_trending_score,
    clean_platform_id,
    coerce_float,
    coerce_int,
    has_brazilian_currency,
    is_blank,
    is_brazilian_warehouse,
    normalize_currency,
    pick_image_url,
    resolve_price,
    stringify_id,
)

UNTITLED_PRODUCT = "Untitled Product"

T = TypeVar("T")


def first_present(extractors: Sequence[Callable[[], Optional[T]]], default: T) -> T:
    for extract in extractors:
        value = extract()
        if value is not None:
            return value
    return default


def _present(value: Any) -> Optional[Any]:
    if is_blank(value):
        return None
    return value.strip() if isinstance(value, str) else value


def _non_negative_int(value: Any) -> Optional[int]:
    if is_blank(value):
        return None
    parsed = coerce_int(value)
    return None if parsed is None else max(parsed, 0)


def _non_negative_float(value: Any) -> Optional[float]:
    if is_blank(value):
        return None
    parsed = coerce_float(value)
    return None if parsed is None else max(parsed, 0.0)


def _seller_name(listing: TikTokListing) -> Optional[str]:
    info = listing.seller_product_info
    if info is None or not info.seller_name:
        return None
    return info.seller_name.strip() or None


def _seller_id(listing: TikTokListing) -> Optional[str]:
    info = listing.seller_product_info
    if info is None:
        return None
    return first_present(
        [lambda: stringify_id(info.seller_id_str), lambda: stringify_id(info.seller_id)],
        None,
    )


def map_to_supabase(
    item: Any,
    max_sold: float = DEFAULT_MAX_SOLD,
    max_rating: float = DEFAULT_MAX_RATING,
) -> SupabaseProduct:
    listing = as_listing(item)

    brazil_signals = has_brazilian_currency(listing.format_price, listing.currency) or is_brazilian_warehouse(
        listing.warehouse_region
    )

    platform_id = clean_platform_id(
        first_present([lambda: _present(listing.product_id_str), lambda: _present(listing.product_id)], None)
    )
    title = first_present([lambda: _present(listing.title)], UNTITLED_PRODUCT)

    orders_24h = first_present(
        [lambda: _non_negative_int(listing.sold_count), lambda: _non_negative_int(listing.global_sold_count)],
        0,
    )
    rating = first_present([lambda: _non_negative_float(listing.product_rating)], 0.0)
    reviews_count = first_present([lambda: _non_negative_int(listing.review_count)], 0)

    shop_name = _seller_name(listing)

    return SupabaseProduct(
        title=title,
        image_url=pick_image_url(listing.cover, listing.img),
        price=resolve_price(listing.floor_price, listing.ceiling_price, listing.format_price),
        orders_24h=orders_24h,
        rating=rating,
        reviews_count=reviews_count,
        trending_score=calculate_trending_score(orders_24h, rating, max_sold, max_rating),
        shop_name=shop_name,
        # no source field feeds these yet
        category_id=None,
        commission_rate=None,
        seller_id=_seller_id(listing),
        seller_name=shop_name,
        platform_id=platform_id,
        currency=normalize_currency(listing.currency, listing.format_price, brazil_signals),
    )
