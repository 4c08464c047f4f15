import random
import time
from typing import Iterable, Mapping, Optional
from urllib.parse import quote

from .base import BaseConnector

MAX_SYNTHETIC_ITEMS = 20

PRODUCT_NAMES = [
    "Smartphone Samsung Galaxy",
    "iPhone 15 Pro Max",
    "Fone de Ouvido Bluetooth",
    "Carregador Portátil",
    "Capa para Celular",
    "Smartwatch Apple Watch",
    "Tablet Samsung",
    "Câmera Digital",
    "Notebook Gamer",
    "Mouse Wireless",
]


class ExampleTikTokShopConnector(BaseConnector):
    name = "example_tiktok_shop"

    def __init__(self, keyword: str = "", limit: int = MAX_SYNTHETIC_ITEMS, rng: Optional[random.Random] = None) -> None:
        self.keyword = keyword.strip()
        self.limit = max(min(limit, MAX_SYNTHETIC_ITEMS), 0)
        self.rng = rng or random.Random()

    def fetch_listings(self) -> Iterable[Mapping]:
        # Synthetic Brazilian listings for local development; live scraping lives elsewhere.
        stamp = int(time.time() * 1000)
        for index in range(self.limit):
            base_name = PRODUCT_NAMES[index % len(PRODUCT_NAMES)]
            title = f"{self.keyword} {base_name}" if self.keyword else base_name
            image = f"https://via.placeholder.com/300x300?text={quote(title)}"
            base_price = self.rng.randint(50, 549)
            product_id = f"br_tiktok_{stamp}_{index}"
            seller_id = f"br_seller_{index + 1}"
            link = f"https://shop.tiktok.com/br/product/br_{index}"
            yield {
                "product_id": product_id,
                "product_id_str": product_id,
                "title": title,
                "cover": image,
                "img": [image],
                "floor_price": base_price,
                "ceiling_price": base_price + self.rng.randint(0, 99),
                "format_price": f"R$ {base_price:.2f}".replace(".", ","),
                "currency": "BRL",
                "warehouse_region": "BR",
                "seller_product_info": {
                    "seller_name": f"Loja Brasileira {index + 1}",
                    "seller_id": seller_id,
                    "seller_id_str": seller_id,
                },
                "product_rating": f"{self.rng.uniform(3, 5):.1f}",
                "review_count": self.rng.randint(10, 1009),
                "sold_count": self.rng.randint(5, 504),
                "global_sold_count": self.rng.randint(10, 1009),
                "schema": link,
                "view_in_shop_button": link,
            }
