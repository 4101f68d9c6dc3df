# FILE: cepoka/constants/categories.py
from typing import Dict, NamedTuple, Optional, Tuple


class Category(NamedTuple):
    id: str          # 조회 키 (상품의 category 필드 값)
    name: str        # UI 표시명 (상품의 categoryName 필드 값)
    icon: str
    image_src: str


CATEGORIES: Tuple[Category, ...] = (
    Category("spa-salon-furniture",  "Spa and salon furnitures",        "🪑",    "/icons/spa-bed.png"),
    Category("beauty-equipment",     "Beauty equipment",                "⚙️",    "/icons/hairdryer.png"),
    Category("facial-waxing",        "Facials and waxing",              "🧖‍♀️", "/icons/hot-stone.png"),
    Category("skincare-accessories", "Skincare products & accessories", "🧴",    "/icons/slim.png"),
    Category("pedicure-manicure",    "Pedicure and manicure",           "💅",    "/icons/nails.png"),
)

CATEGORY_IDS = tuple(c.id for c in CATEGORIES)
NAME_BY_ID: Dict[str, str] = {c.id: c.name for c in CATEGORIES}


def get_category(category_id: Optional[str]) -> Optional[Category]:
    for c in CATEGORIES:
        if c.id == category_id:
            return c
    return None
