# src/pipeline/taxonomy_backfill.py
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from src.core.taxonomy import (
    DEFAULT_SUBCATEGORY_NAME,
    DEFAULT_SUBCATEGORY_SLUG,
    DEFAULT_TYPE_NAME,
    DEFAULT_TYPE_SLUG,
    default_subcategory_description,
    default_type_description,
)
from src.pipeline.report_generator import BackfillReport, CategoryBackfillResult
from src.storage.orm_models import CategoryORM
from src.storage.repository import CatalogRepository

logger = logging.getLogger(__name__)


class TaxonomyBackfill:
    """Move a Category -> Product catalog onto Category -> Type -> SubCategory -> Product.

    Every category gets a default "General" type holding a default
    "All Products" sub-category, and its legacy products without a
    sub-category are pointed there. Each category is committed on its own,
    so an aborted run keeps the categories it finished and a re-run picks up
    the rest without duplicating anything.
    """

    def __init__(self, session: Session):
        self._session = session
        self._repo = CatalogRepository(session)

    def run(self) -> BackfillReport:
        report = BackfillReport()
        categories = self._repo.list_categories()
        logger.info("Found %d categories", len(categories))

        for category in categories:
            result = self.process_category(category)
            report.categories.append(result)

        self.verify(report)
        report.complete()
        return report

    def process_category(self, category: CategoryORM) -> CategoryBackfillResult:
        # Read before any write: a rollback expires the instance
        category_id = category.id
        category_name = category.name
        try:
            type_, type_created = self._repo.ensure_type(
                category,
                slug=DEFAULT_TYPE_SLUG,
                name=DEFAULT_TYPE_NAME,
                description=default_type_description(category_name),
            )
            sub, sub_created = self._repo.ensure_subcategory(
                type_,
                slug=DEFAULT_SUBCATEGORY_SLUG,
                name=DEFAULT_SUBCATEGORY_NAME,
                description=default_subcategory_description(category_name),
            )
            updated = self._repo.assign_legacy_products(category_id, sub.id)
            result = CategoryBackfillResult(
                category_id=category_id,
                category_name=category_name,
                type_id=type_.id,
                type_name=type_.name,
                type_created=type_created,
                sub_category_id=sub.id,
                sub_category_name=sub.name,
                sub_category_created=sub_created,
                products_updated=updated,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            logger.error("Backfill aborted at category %s (%s)", category_name, category_id, exc_info=True)
            raise

        logger.info(
            "Category %s: type %s (%s), subcategory %s (%s), %d products updated",
            category_name,
            result.type_id,
            "created" if type_created else "existing",
            result.sub_category_id,
            "created" if sub_created else "existing",
            updated,
        )
        return result

    def verify(self, report: BackfillReport) -> None:
        report.products_without_subcategory = self._repo.count_products_without_subcategory()
        report.total_products = self._repo.count_products()
        if report.products_without_subcategory:
            logger.warning(
                "%d of %d products still have no subcategory",
                report.products_without_subcategory,
                report.total_products,
            )
        else:
            logger.info("All %d products have a subcategory", report.total_products)
