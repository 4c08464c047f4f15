import copy
import logging

import pytest

from tiktok_br.core.errors import InvalidListingError
from tiktok_br.schemas.listing import FilterOptions, TikTokListing
from tiktok_br.services.filters import filter_brazil, has_brazil_signals, is_price_in_range

BRAZILIAN_ITEM = {
    "product_id": "123",
    "product_id_str": "123",
    "title": "Produto Brasileiro",
    "cover": "https://example.com/image.jpg",
    "floor_price": 99.99,
    "format_price": "R$ 99,99",
    "currency": "BRL",
    "warehouse_region": "São Paulo, Brasil",
    "seller_product_info": {"seller_name": "Loja BR", "seller_id_str": "seller123"},
}

VIETNAMESE_ITEM = {
    "product_id": "456",
    "product_id_str": "456",
    "title": "Vietnamese Product",
    "cover": "https://example.com/image2.jpg",
    "floor_price": "586671556",
    "format_price": "586.671.556₫",
    "currency": "VND",
    "warehouse_region": "Ho Chi Minh, Vietnam",
    "seller_product_info": {"seller_name": "VN Shop", "seller_id_str": "seller456"},
}

ITEM_WITHOUT_IMAGE = {
    "product_id": "789",
    "title": "No Image Product",
    "cover": "",
    "img": [],
    "floor_price": 50.0,
    "format_price": "R$ 50,00",
    "currency": "BRL",
    "warehouse_region": "Rio de Janeiro, Brasil",
}

EXPENSIVE_ITEM = {
    "product_id": "999",
    "title": "Expensive Product",
    "cover": "https://example.com/expensive.jpg",
    "floor_price": 2000.00,
    "format_price": "R$ 2.000,00",
    "currency": "BRL",
    "warehouse_region": "Brasil",
}


def _ids(items):
    return [item["product_id"] for item in items]


def test_keeps_only_brazilian_items_when_signals_required():
    filtered = filter_brazil([BRAZILIAN_ITEM, VIETNAMESE_ITEM], FilterOptions(require_brazil_signals=True))
    assert _ids(filtered) == ["123"]


def test_keeps_everything_when_signals_not_required():
    filtered = filter_brazil([BRAZILIAN_ITEM, VIETNAMESE_ITEM], {"require_brazil_signals": False})
    assert _ids(filtered) == ["123", "456"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"currency": "BRL"},
        {"format_price": "R$ 123,45"},
        {"warehouse_region": "São Paulo, SP, Brasil"},
        {"schema": {"url": "https://shop.tiktok.com.br/product/1"}},
        {"view_in_shop_button": {"schema": "https://shop.tiktok.com/br-store/view"}},
        {"view_in_shop_button": "https://shop.tiktok.com/view?market=Brasil"},
    ],
)
def test_detects_each_brazil_signal(overrides):
    item = {**VIETNAMESE_ITEM, **overrides}
    assert filter_brazil([item], FilterOptions()) == [item]


def test_url_signal_only_reads_link_structures():
    item = {**VIETNAMESE_ITEM, "description": "ships from brazil"}
    assert not has_brazil_signals(TikTokListing.model_validate(item))


def test_drops_items_without_image():
    filtered = filter_brazil([BRAZILIAN_ITEM, ITEM_WITHOUT_IMAGE], FilterOptions(drop_if_no_image=True))
    assert _ids(filtered) == ["123"]


def test_keeps_items_without_image_when_allowed():
    filtered = filter_brazil([BRAZILIAN_ITEM, ITEM_WITHOUT_IMAGE], FilterOptions(drop_if_no_image=False))
    assert _ids(filtered) == ["123", "789"]


def test_alternate_image_counts_as_image():
    item = {**ITEM_WITHOUT_IMAGE, "img": ["not-a-url", "//cdn.example.com/a.jpg"]}
    assert filter_brazil([item], FilterOptions()) == [item]


def test_filters_by_minimum_price():
    filtered = filter_brazil([BRAZILIAN_ITEM, EXPENSIVE_ITEM], FilterOptions(min_price=1000))
    assert _ids(filtered) == ["999"]


def test_filters_by_maximum_price():
    filtered = filter_brazil([BRAZILIAN_ITEM, EXPENSIVE_ITEM], FilterOptions(max_price=1000))
    assert _ids(filtered) == ["123"]


def test_filters_by_price_range():
    filtered = filter_brazil([BRAZILIAN_ITEM, EXPENSIVE_ITEM], FilterOptions(min_price=50, max_price=150))
    assert _ids(filtered) == ["123"]


def test_price_falls_back_to_display_string():
    item = {**EXPENSIVE_ITEM, "floor_price": None}
    assert filter_brazil([item], FilterOptions(max_price=1000)) == []
    assert filter_brazil([item], FilterOptions(min_price=1500)) == [item]


def test_unparseable_price_is_not_filtered():
    item = {**BRAZILIAN_ITEM, "floor_price": None, "format_price": "consulte"}
    assert filter_brazil([item], FilterOptions(min_price=1000)) == [item]


def test_foreign_currency_without_signals_is_dropped_when_bounded():
    filtered = filter_brazil([VIETNAMESE_ITEM], FilterOptions(require_brazil_signals=False, min_price=100))
    assert filtered == []


def test_foreign_currency_is_dropped_even_with_unparseable_price():
    item = {**VIETNAMESE_ITEM, "floor_price": None, "format_price": "liên hệ"}
    listing = TikTokListing.model_validate(item)
    assert not is_price_in_range(listing, max_price=5000)
    assert is_price_in_range(listing)


def test_foreign_currency_with_brazil_signals_is_compared():
    item = {**VIETNAMESE_ITEM, "floor_price": 120, "warehouse_region": "Curitiba, PR"}
    options = FilterOptions(require_brazil_signals=False, min_price=100, max_price=200)
    assert filter_brazil([item], options) == [item]


def test_missing_currency_without_signals_is_compared():
    item = {**VIETNAMESE_ITEM, "currency": None, "floor_price": 120}
    options = FilterOptions(require_brazil_signals=False, min_price=100)
    assert filter_brazil([item], options) == [item]


def test_zero_bound_counts_as_requested():
    options = FilterOptions(require_brazil_signals=False, min_price=0)
    assert filter_brazil([VIETNAMESE_ITEM], options) == []


def test_applies_all_filters_together():
    items = [BRAZILIAN_ITEM, VIETNAMESE_ITEM, ITEM_WITHOUT_IMAGE, EXPENSIVE_ITEM]
    options = FilterOptions(require_brazil_signals=True, drop_if_no_image=True, min_price=90, max_price=1500)
    assert _ids(filter_brazil(items, options)) == ["123"]


def test_handles_empty_input():
    assert filter_brazil([], FilterOptions()) == []


def test_does_not_mutate_input():
    items = [copy.deepcopy(BRAZILIAN_ITEM), copy.deepcopy(VIETNAMESE_ITEM)]
    snapshot = copy.deepcopy(items)
    filtered = filter_brazil(items, FilterOptions(min_price=10))
    assert items == snapshot
    assert filtered[0] is items[0]


def test_accepts_listing_models():
    listing = TikTokListing.model_validate(BRAZILIAN_ITEM)
    assert filter_brazil([listing]) == [listing]


def test_reports_counts_to_observer():
    reports = []
    filter_brazil([BRAZILIAN_ITEM, VIETNAMESE_ITEM, EXPENSIVE_ITEM], FilterOptions(), observer=reports.append)
    assert len(reports) == 1
    assert (reports[0].original, reports[0].kept, reports[0].filtered_out) == (3, 2, 1)


def test_default_observer_logs_counts(caplog):
    caplog.set_level(logging.INFO, logger="tiktok_br.services.filters")
    filter_brazil([BRAZILIAN_ITEM, VIETNAMESE_ITEM], FilterOptions())
    assert "original=2 kept=1 filtered_out=1" in caplog.text
    assert "Filtered out 1 items without Brazil signals" in caplog.text


def test_silenced_observer_logs_nothing(caplog):
    caplog.set_level(logging.DEBUG, logger="tiktok_br.services.filters")
    filter_brazil([BRAZILIAN_ITEM, VIETNAMESE_ITEM], FilterOptions(), observer=None)
    assert [record for record in caplog.records if record.name == "tiktok_br.services.filters"] == []


def test_rejects_non_record_items():
    with pytest.raises(InvalidListingError):
        filter_brazil([BRAZILIAN_ITEM, 42], FilterOptions())
