# src/storage/repository.py
from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.core.models import CategoryCreate, SubCategoryCreate, TypeCreate
from src.storage.orm_models import CategoryORM, ProductORM, SubCategoryORM, TypeORM
from src.storage.upsert import insert_ignore

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    pass


class NotFoundError(CatalogError):
    pass


class SlugConflictError(CatalogError):
    pass


class NameConflictError(CatalogError):
    pass


class InUseError(CatalogError):
    pass


class CatalogRepository:
    def __init__(self, session: Session):
        self._session = session

    # ── Reads ──

    def list_categories(self) -> list[CategoryORM]:
        return (
            self._session.query(CategoryORM)
            .order_by(CategoryORM.name, CategoryORM.id)
            .all()
        )

    def get_category(self, category_id: str) -> CategoryORM | None:
        return self._session.query(CategoryORM).filter(CategoryORM.id == category_id).first()

    def get_category_by_slug(self, slug: str) -> CategoryORM | None:
        return self._session.query(CategoryORM).filter(CategoryORM.slug == slug).first()

    def get_type(self, type_id: str) -> TypeORM | None:
        return self._session.query(TypeORM).filter(TypeORM.id == type_id).first()

    def get_subcategory(self, sub_category_id: str) -> SubCategoryORM | None:
        return (
            self._session.query(SubCategoryORM)
            .filter(SubCategoryORM.id == sub_category_id)
            .first()
        )

    def find_type(self, category_id: str, slug: str) -> TypeORM | None:
        return (
            self._session.query(TypeORM)
            .filter(TypeORM.category_id == category_id, TypeORM.slug == slug)
            .first()
        )

    def find_subcategory(self, type_id: str, slug: str) -> SubCategoryORM | None:
        return (
            self._session.query(SubCategoryORM)
            .filter(SubCategoryORM.type_id == type_id, SubCategoryORM.slug == slug)
            .first()
        )

    def list_types(self, category_id: str | None = None) -> list[TypeORM]:
        query = self._session.query(TypeORM)
        if category_id:
            query = query.filter(TypeORM.category_id == category_id)
        return query.order_by(TypeORM.name, TypeORM.id).all()

    def list_subcategories(
        self,
        type_id: str | None = None,
        category_id: str | None = None,
    ) -> list[SubCategoryORM]:
        query = self._session.query(SubCategoryORM)
        if type_id:
            query = query.filter(SubCategoryORM.type_id == type_id)
        if category_id:
            query = query.join(TypeORM, SubCategoryORM.type_id == TypeORM.id).filter(
                TypeORM.category_id == category_id
            )
        return query.order_by(SubCategoryORM.name, SubCategoryORM.id).all()

    def count_products(self) -> int:
        return self._session.query(func.count(ProductORM.id)).scalar()

    def count_products_without_subcategory(self) -> int:
        return (
            self._session.query(func.count(ProductORM.id))
            .filter(ProductORM.sub_category_id.is_(None))
            .scalar()
        )

    def _product_counts_by_subcategory(self) -> dict[str, int]:
        rows = (
            self._session.query(ProductORM.sub_category_id, func.count(ProductORM.id))
            .filter(ProductORM.sub_category_id.isnot(None))
            .group_by(ProductORM.sub_category_id)
            .all()
        )
        return {sub_id: count for sub_id, count in rows}

    def _legacy_counts_by_category(self) -> dict[str, int]:
        rows = (
            self._session.query(ProductORM.category_id, func.count(ProductORM.id))
            .filter(ProductORM.category_id.isnot(None))
            .group_by(ProductORM.category_id)
            .all()
        )
        return {cat_id: count for cat_id, count in rows}

    def category_tree(self) -> list[dict]:
        """Categories with their types and sub-categories, nested, with product counts."""
        sub_counts = self._product_counts_by_subcategory()
        legacy_counts = self._legacy_counts_by_category()
        tree = []
        for cat in self.list_categories():
            types = []
            for t in cat.types:
                subs = [
                    {
                        "id": s.id,
                        "name": s.name,
                        "slug": s.slug,
                        "product_count": sub_counts.get(s.id, 0),
                    }
                    for s in t.sub_categories
                ]
                types.append({
                    "id": t.id,
                    "name": t.name,
                    "slug": t.slug,
                    "product_count": sum(s["product_count"] for s in subs),
                    "sub_categories": subs,
                })
            tree.append({
                "id": cat.id,
                "name": cat.name,
                "slug": cat.slug,
                "legacy_product_count": legacy_counts.get(cat.id, 0),
                "types": types,
            })
        return tree

    # ── Default taxonomy (used by the backfill) ──

    def ensure_type(
        self,
        category: CategoryORM,
        slug: str,
        name: str,
        description: str | None = None,
    ) -> tuple[TypeORM, bool]:
        """Return the type with ``slug`` under ``category``, creating it if absent.

        An existing row with the same slug is adopted as-is, whoever created it.
        """
        created = insert_ignore(
            self._session,
            TypeORM,
            {"name": name, "slug": slug, "description": description, "category_id": category.id},
            ["category_id", "slug"],
        )
        type_ = self.find_type(category.id, slug)
        return type_, created

    def ensure_subcategory(
        self,
        type_: TypeORM,
        slug: str,
        name: str,
        description: str | None = None,
    ) -> tuple[SubCategoryORM, bool]:
        created = insert_ignore(
            self._session,
            SubCategoryORM,
            {"name": name, "slug": slug, "description": description, "type_id": type_.id},
            ["type_id", "slug"],
        )
        sub = self.find_subcategory(type_.id, slug)
        return sub, created

    def assign_legacy_products(self, category_id: str, sub_category_id: str) -> int:
        """Point every unassigned product of a legacy category at ``sub_category_id``.

        One set-based UPDATE; products that already have a sub-category are left alone.
        """
        return (
            self._session.query(ProductORM)
            .filter(
                ProductORM.category_id == category_id,
                ProductORM.sub_category_id.is_(None),
            )
            .update(
                {ProductORM.sub_category_id: sub_category_id},
                synchronize_session=False,
            )
        )

    # ── Catalog writes ──

    def create_category(self, data: CategoryCreate) -> CategoryORM:
        _check_unique_slugs([t.slug for t in data.types], "Type")
        if self._session.query(CategoryORM.id).filter(CategoryORM.name == data.name).first() is not None:
            raise NameConflictError(f"Category name already exists: {data.name}")
        created = insert_ignore(
            self._session,
            CategoryORM,
            {
                "name": data.name,
                "slug": data.slug,
                "description": data.description,
                "image": data.image,
            },
            ["slug"],
        )
        if not created:
            raise SlugConflictError(f"Category slug already exists: {data.slug}")
        category = self.get_category_by_slug(data.slug)
        for type_data in data.types:
            self._insert_type(category, type_data)
        logger.info("Created category %s with %d type(s)", category.slug, len(data.types))
        return category

    def create_type(self, data: TypeCreate) -> TypeORM:
        category = self._resolve_category(data)
        return self._insert_type(category, data)

    def create_subcategory(self, data: SubCategoryCreate) -> SubCategoryORM:
        type_ = self._resolve_type(data)
        return self._insert_subcategory(type_, data)

    def _insert_type(self, category: CategoryORM, data: TypeCreate) -> TypeORM:
        _check_unique_slugs([s.slug for s in data.sub_categories], "SubCategory")
        created = insert_ignore(
            self._session,
            TypeORM,
            {
                "name": data.name,
                "slug": data.slug,
                "description": data.description,
                "image": data.image,
                "category_id": category.id,
            },
            ["category_id", "slug"],
        )
        if not created:
            raise SlugConflictError(f"Type slug already exists in this category: {data.slug}")
        type_ = self.find_type(category.id, data.slug)
        for sub_data in data.sub_categories:
            self._insert_subcategory(type_, sub_data)
        return type_

    def _insert_subcategory(self, type_: TypeORM, data: SubCategoryCreate) -> SubCategoryORM:
        created = insert_ignore(
            self._session,
            SubCategoryORM,
            {
                "name": data.name,
                "slug": data.slug,
                "description": data.description,
                "image": data.image,
                "type_id": type_.id,
            },
            ["type_id", "slug"],
        )
        if not created:
            raise SlugConflictError(f"SubCategory slug already exists in this type: {data.slug}")
        return self.find_subcategory(type_.id, data.slug)

    def _resolve_category(self, data: TypeCreate) -> CategoryORM:
        if data.category_id:
            category = self.get_category(data.category_id)
        elif data.category_slug:
            category = self.get_category_by_slug(data.category_slug)
        elif data.category_name:
            category = (
                self._session.query(CategoryORM)
                .filter(CategoryORM.name == data.category_name)
                .first()
            )
        else:
            raise CatalogError("Category ID, slug, or name is required")
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def _resolve_type(self, data: SubCategoryCreate) -> TypeORM:
        if data.type_id:
            type_ = self.get_type(data.type_id)
        elif data.type_slug:
            type_ = (
                self._session.query(TypeORM)
                .filter(TypeORM.slug == data.type_slug)
                .order_by(TypeORM.created_at, TypeORM.id)
                .first()
            )
        else:
            raise CatalogError("Type ID or slug is required")
        if type_ is None:
            raise NotFoundError("Type not found")
        return type_

    def delete_category(self, category_id: str) -> None:
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        if category.products:
            raise InUseError("Cannot delete category with existing products")
        if category.types:
            raise InUseError(
                f"Cannot delete category with {len(category.types)} types. "
                "Delete or reassign the types first."
            )
        self._session.delete(category)
        self._session.flush()

    def delete_type(self, type_id: str) -> None:
        type_ = self.get_type(type_id)
        if type_ is None:
            raise NotFoundError("Type not found")
        if type_.sub_categories:
            raise InUseError(
                f"Cannot delete type with {len(type_.sub_categories)} subcategories. "
                "Delete or reassign the subcategories first."
            )
        self._session.delete(type_)
        self._session.flush()

    def delete_subcategory(self, sub_category_id: str) -> None:
        sub = self.get_subcategory(sub_category_id)
        if sub is None:
            raise NotFoundError("SubCategory not found")
        if sub.products:
            raise InUseError(
                f"Cannot delete subcategory with {len(sub.products)} products. "
                "Delete or reassign the products first."
            )
        self._session.delete(sub)
        self._session.flush()


def _check_unique_slugs(slugs: list[str], kind: str) -> None:
    seen: set[str] = set()
    for slug in slugs:
        if slug in seen:
            raise SlugConflictError(f"Duplicate {kind} slug in request: {slug}")
        seen.add(slug)
