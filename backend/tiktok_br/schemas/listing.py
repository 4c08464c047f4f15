import math
from collections.abc import Mapping
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from tiktok_br.core.errors import InvalidListingError


def _scalar_or_none(value: Any) -> Any:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float, str)):
        return value
    return None


def _text_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


Scalar = Annotated[Union[int, float, str, None], BeforeValidator(_scalar_or_none)]
Text = Annotated[Optional[str], BeforeValidator(_text_or_none)]


class SellerProductInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    seller_name: Text = None
    seller_id: Scalar = None
    seller_id_str: Text = None


class TikTokListing(BaseModel):
    """A scraped TikTok Shop product.

    Known fields are typed and optional; anything else the scraper sent is
    kept in ``model_extra``. Values of an unusable shape become ``None``
    instead of failing validation.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    product_id: Scalar = None
    product_id_str: Text = None
    title: Text = None
    cover: Text = None
    img: Optional[List[Any]] = None
    floor_price: Scalar = None
    ceiling_price: Scalar = None
    format_price: Text = None
    currency: Text = None
    warehouse_region: Text = None
    seller_product_info: Optional[SellerProductInfo] = None
    product_rating: Scalar = None
    review_count: Scalar = None
    sold_count: Scalar = None
    global_sold_count: Scalar = None
    schema_: Any = Field(default=None, alias="schema")
    view_in_shop_button: Any = None

    @field_validator("img", mode="before")
    @classmethod
    def _coerce_images(cls, value: Any) -> Optional[List[Any]]:
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return list(value)
        return None

    @field_validator("seller_product_info", mode="before")
    @classmethod
    def _coerce_seller(cls, value: Any) -> Any:
        if isinstance(value, (dict, SellerProductInfo)):
            return value
        return None


class FilterOptions(BaseModel):
    require_brazil_signals: bool = True
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    drop_if_no_image: bool = True

    @classmethod
    def from_settings(cls, settings) -> "FilterOptions":
        return cls(
            require_brazil_signals=settings.require_brazil_signals,
            min_price=settings.min_price,
            max_price=settings.max_price,
            drop_if_no_image=settings.drop_if_no_image,
        )


class FilterStats(BaseModel):
    original: int
    kept: int
    filtered_out: int
    require_brazil_signals: bool = True


class SupabaseProduct(BaseModel):
    title: str
    image_url: Optional[str] = None
    price: float = 0
    orders_24h: int = 0
    rating: float = 0
    reviews_count: int = 0
    trending_score: float = 0
    shop_name: Optional[str] = None
    category_id: Optional[int] = None
    commission_rate: Optional[float] = None
    seller_id: Optional[str] = None
    seller_name: Optional[str] = None
    platform_id: str
    currency: str = "USD"


def as_listing(item: Any) -> TikTokListing:
    if isinstance(item, TikTokListing):
        return item
    if isinstance(item, Mapping):
        return TikTokListing.model_validate(dict(item))
    raise InvalidListingError(f"Expected a listing mapping, got {type(item).__name__}")
