import math
import re
import secrets
import string
import time
import unicodedata
from typing import Any, Iterable, Optional

FALLBACK_ID_PREFIX = "tiktok"
FALLBACK_ID_ALPHABET = string.digits + string.ascii_lowercase
FALLBACK_ID_SUFFIX_LENGTH = 9

DEFAULT_CURRENCY = "USD"
BRAZIL_CURRENCY = "BRL"
BRAZIL_CURRENCY_MARKERS = ("R$", "BRL")

TRENDING_SALES_WEIGHT = 0.6
TRENDING_RATING_WEIGHT = 0.4
DEFAULT_MAX_SOLD = 1000
DEFAULT_MAX_RATING = 5

CURRENCY_PATTERN = re.compile(r"R\$|BRL|VND|USD|[$₫€£¥₹]")
NUMBER_PATTERN = re.compile(r"-?(?:\d[\d.,]*|[.,]\d+)")
SEPARATOR_PATTERN = re.compile(r"[.,]")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")
LEADING_FLOAT_PATTERN = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

BRAZILIAN_STATE_CODES = (
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG",
    "PA", "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
    "BR",
)

BRAZILIAN_STATE_NAMES = (
    "Acre", "Alagoas", "Amapá", "Amazonas", "Bahia", "Ceará", "Distrito Federal",
    "Espírito Santo", "Goiás", "Maranhão", "Mato Grosso", "Mato Grosso do Sul",
    "Minas Gerais", "Pará", "Paraíba", "Paraná", "Pernambuco", "Piauí",
    "Rio de Janeiro", "Rio Grande do Norte", "Rio Grande do Sul", "Rondônia",
    "Roraima", "Santa Catarina", "São Paulo", "Sergipe", "Tocantins",
    "Brasil", "Brazil",
)


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).upper()


_FOLDED_STATE_NAMES = tuple(_fold(name) for name in BRAZILIAN_STATE_NAMES)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_finite_float(value: Any) -> Optional[float]:
    if not is_number(value):
        return None
    try:
        converted = float(value)
    except OverflowError:
        return None
    return converted if math.isfinite(converted) else None


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_price(value: Any) -> float:
    """Parse a price given as a number or a locale formatted string.

    Handles "586671556", "586.671.556₫", "R$ 1.234,56" and "$12.34". The last
    separator is decimal only when exactly two digits follow it, every other
    dot or comma groups thousands. Anything unparseable is 0.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    if not isinstance(value, str):
        return 0

    cleaned = re.sub(r"\s+", "", CURRENCY_PATTERN.sub("", value))
    match = NUMBER_PATTERN.search(cleaned)
    if not match:
        return 0

    number = match.group(0).rstrip(".,")
    sign = -1 if number.startswith("-") else 1
    digits = number.lstrip("-")

    last_separator = max(digits.rfind("."), digits.rfind(","))
    if last_separator != -1 and len(digits) - last_separator - 1 == 2:
        whole = SEPARATOR_PATTERN.sub("", digits[:last_separator]) or "0"
        parsed = float(f"{whole}.{digits[last_separator + 1:]}")
    else:
        parsed = float(SEPARATOR_PATTERN.sub("", digits))
    return sign * parsed if math.isfinite(parsed) else 0


def coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = LEADING_INT_PATTERN.match(value)
        if not match:
            return None
        try:
            return int(match.group(1))
        except ValueError:
            # digit run longer than the interpreter's int conversion limit
            return None
    return None


def coerce_float(value: Any) -> Optional[float]:
    if is_number(value):
        return as_finite_float(value)
    if isinstance(value, str):
        match = LEADING_FLOAT_PATTERN.match(value)
        if not match:
            return None
        parsed = float(match.group(1))
        return parsed if math.isfinite(parsed) else None
    return None


def _is_image_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    clean = value.strip()
    return clean.startswith("http") or clean.startswith("//")


def pick_image_url(primary: Optional[str] = None, alternates: Optional[Iterable[Any]] = None) -> Optional[str]:
    if isinstance(primary, str) and primary.strip():
        return primary.strip()
    for image in alternates or ():
        if _is_image_url(image):
            return image.strip()
    return None


def has_brazilian_currency(price_str: Optional[str] = None, currency: Optional[str] = None) -> bool:
    if isinstance(currency, str) and currency.strip().upper() in BRAZIL_CURRENCY_MARKERS:
        return True
    if not isinstance(price_str, str) or not price_str:
        return False
    return any(marker in price_str for marker in BRAZIL_CURRENCY_MARKERS)


def is_brazilian_warehouse(warehouse_region: Optional[str] = None) -> bool:
    # Two letter codes only count as whole tokens: "VIETNAM" must not match "AM".
    if not isinstance(warehouse_region, str) or not warehouse_region.strip():
        return False
    region = _fold(warehouse_region)
    if any(name in region for name in _FOLDED_STATE_NAMES):
        return True
    tokens = set(re.findall(r"[^\W_]+", region))
    return any(code in tokens for code in BRAZILIAN_STATE_CODES)


def _bounded_ratio(value: Any, bound: Any) -> float:
    if not is_number(value) or not is_number(bound) or not bound > 0:
        return 0.0
    try:
        ratio = value / bound
    except OverflowError:
        return 1.0 if value > 0 else 0.0
    if math.isnan(ratio):
        return 0.0
    return min(max(ratio, 0.0), 1.0)


def calculate_trending_score(
    sold_count: float = 0,
    rating: float = 0,
    max_sold: float = DEFAULT_MAX_SOLD,
    max_rating: float = DEFAULT_MAX_RATING,
) -> float:
    normalized_sales = _bounded_ratio(sold_count, max_sold)
    normalized_rating = _bounded_ratio(rating, max_rating)
    score = normalized_sales * TRENDING_SALES_WEIGHT + normalized_rating * TRENDING_RATING_WEIGHT
    # half-up to two decimals
    return min(max(math.floor(score * 100 + 0.5) / 100, 0.0), 1.0)


def normalize_currency(
    original_currency: Optional[str] = None,
    price_str: Optional[str] = None,
    has_brazil_signals: bool = False,
) -> str:
    if has_brazil_signals or has_brazilian_currency(price_str, original_currency):
        return BRAZIL_CURRENCY
    if isinstance(original_currency, str) and original_currency.strip():
        return original_currency.strip()
    return DEFAULT_CURRENCY


def stringify_id(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            value = int(value)
    elif not is_number(value):
        return None
    try:
        return str(value)
    except ValueError:
        # past the interpreter's int to str digit limit
        return None


def _fallback_platform_id() -> str:
    suffix = "".join(secrets.choice(FALLBACK_ID_ALPHABET) for _ in range(FALLBACK_ID_SUFFIX_LENGTH))
    return f"{FALLBACK_ID_PREFIX}_{int(time.time() * 1000)}_{suffix}"


def clean_platform_id(product_id: Any) -> str:
    return stringify_id(product_id) or _fallback_platform_id()


def resolve_price(*candidates: Any) -> float:
    """First candidate that parses to a positive price, else 0."""
    for candidate in candidates:
        if is_blank(candidate):
            continue
        price = as_finite_float(parse_price(candidate))
        if price is not None and price > 0:
            return price
    return 0
