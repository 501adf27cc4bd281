# src/pipeline/report_generator.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


@dataclass
class CategoryBackfillResult:
    category_id: str
    category_name: str
    type_id: str
    type_name: str
    type_created: bool
    sub_category_id: str
    sub_category_name: str
    sub_category_created: bool
    products_updated: int = 0

    def to_dict(self) -> dict:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "type_id": self.type_id,
            "type_created": self.type_created,
            "sub_category_id": self.sub_category_id,
            "sub_category_created": self.sub_category_created,
            "products_updated": self.products_updated,
        }

    def lines(self) -> list[str]:
        type_state = "Created" if self.type_created else "Existing"
        sub_state = "Created" if self.sub_category_created else "Existing"
        return [
            f"Category: {self.category_name}",
            f"  {type_state} Type: {self.type_name} ({self.type_id})",
            f"  {sub_state} SubCategory: {self.sub_category_name} ({self.sub_category_id})",
            f"  Updated {self.products_updated} products",
        ]


@dataclass
class BackfillReport:
    categories: list[CategoryBackfillResult] = field(default_factory=list)
    total_products: int | None = None
    products_without_subcategory: int | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    @property
    def types_created(self) -> int:
        return sum(1 for c in self.categories if c.type_created)

    @property
    def sub_categories_created(self) -> int:
        return sum(1 for c in self.categories if c.sub_category_created)

    @property
    def products_updated(self) -> int:
        return sum(c.products_updated for c in self.categories)

    @property
    def verified(self) -> bool:
        return self.products_without_subcategory is not None

    @property
    def all_assigned(self) -> bool:
        return self.products_without_subcategory == 0

    def complete(self) -> None:
        self.completed_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict:
        return {
            "categories_processed": len(self.categories),
            "types_created": self.types_created,
            "sub_categories_created": self.sub_categories_created,
            "products_updated": self.products_updated,
            "total_products": self.total_products,
            "products_without_subcategory": self.products_without_subcategory,
            "categories": [c.to_dict() for c in self.categories],
            "started_at": str(self.started_at),
            "completed_at": str(self.completed_at) if self.completed_at else None,
        }

    def summary_lines(self) -> list[str]:
        lines = [
            f"Categories processed: {len(self.categories)}",
            f"  Types created:         {self.types_created}",
            f"  SubCategories created: {self.sub_categories_created}",
            f"  Products updated:      {self.products_updated}",
        ]
        if self.verified:
            lines.append("Verification:")
            lines.append(f"  Total products: {self.total_products}")
            lines.append(f"  Products without subCategory: {self.products_without_subcategory}")
            if self.all_assigned:
                lines.append("  All products have been migrated")
            else:
                lines.append("  WARNING: some products are missing a subCategory")
        return lines
