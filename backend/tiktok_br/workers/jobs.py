import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Union

from tiktok_br.connectors.base import BaseConnector
from tiktok_br.connectors.example_tiktok_shop import ExampleTikTokShopConnector
from tiktok_br.core.config import get_settings
from tiktok_br.schemas.listing import FilterOptions, TikTokListing
from tiktok_br.services.filters import filter_brazil
from tiktok_br.services.mapping import map_to_supabase

logger = logging.getLogger(__name__)

RecordSink = Callable[[dict], None]


def _raw_payload(item: Any) -> dict:
    if isinstance(item, TikTokListing):
        return item.model_dump(by_alias=True, exclude_none=True)
    return dict(item)


def run_pipeline(
    listings: Iterable[Any],
    options: Union[FilterOptions, Mapping, None] = None,
    sink: Optional[RecordSink] = None,
) -> List[dict]:
    """Filter a fetched batch, map the survivors and pair each with its raw record."""
    settings = get_settings()
    if isinstance(options, Mapping):
        options = FilterOptions.model_validate(options)
    options = options or FilterOptions.from_settings(settings)

    raw_items = list(listings)
    filtered = filter_brazil(raw_items, options)

    records: List[dict] = []
    for item in filtered:
        mapped = map_to_supabase(
            item, max_sold=settings.trending_max_sold, max_rating=settings.trending_max_rating
        )
        record = {"raw": _raw_payload(item), "mapped": mapped.model_dump()}
        records.append(record)
        if sink is not None:
            sink(record)

    logger.info(
        "Pipeline summary raw=%s kept=%s mapped=%s",
        len(raw_items),
        len(filtered),
        len(records),
    )
    if options.require_brazil_signals and len(raw_items) > len(filtered):
        logger.warning("Dropped %s items without Brazil signals or outside the filters", len(raw_items) - len(filtered))
    return records


def ingest_source(
    connector: Optional[BaseConnector] = None,
    options: Union[FilterOptions, Mapping, None] = None,
    sink: Optional[RecordSink] = None,
) -> List[dict]:
    settings = get_settings()
    connector = connector or ExampleTikTokShopConnector(keyword=settings.keyword, limit=settings.limit)
    try:
        raw_items = list(connector.fetch_listings())
    except Exception:
        logger.exception("Connector %s failed to fetch listings", connector.name)
        raise
    logger.info("Fetched %s raw items from %s", len(raw_items), connector.name)
    return run_pipeline(raw_items, options, sink)
