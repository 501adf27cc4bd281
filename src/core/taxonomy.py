# src/core/taxonomy.py
from __future__ import annotations

from slugify import slugify

DEFAULT_TYPE_SLUG = "general"
DEFAULT_TYPE_NAME = "General"

DEFAULT_SUBCATEGORY_SLUG = "all-products"
DEFAULT_SUBCATEGORY_NAME = "All Products"

DEFAULT_CONCERNS: list[dict[str, str]] = [
    {"name": "Acne", "slug": "acne"},
    {"name": "Anti-Aging", "slug": "anti-aging"},
    {"name": "Dandruff", "slug": "dandruff"},
    {"name": "Dry Skin", "slug": "dry-skin"},
    {"name": "Hair Fall", "slug": "hair-fall"},
    {"name": "Oil Control", "slug": "oil-control"},
    {"name": "Pore Care", "slug": "pore-care"},
    {"name": "Hyperpigmentation", "slug": "hyperpigmentation"},
    {"name": "Hair Thinning", "slug": "hair-thinning"},
    {"name": "Sun Protection", "slug": "sun-protection"},
]


def make_slug(text: str) -> str:
    return slugify(text)


def default_type_description(category_name: str) -> str:
    return f"General {category_name} products"


def default_subcategory_description(category_name: str) -> str:
    return f"All {category_name} products"
