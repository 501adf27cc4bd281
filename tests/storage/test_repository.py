# tests/storage/test_repository.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.core.models import CategoryCreate, SubCategoryCreate, TypeCreate
from src.storage.orm_models import Base, CategoryORM, ProductORM, SubCategoryORM, TypeORM
from src.storage.repository import (
    CatalogError,
    CatalogRepository,
    InUseError,
    NameConflictError,
    NotFoundError,
    SlugConflictError,
)


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def repo(db_session):
    return CatalogRepository(db_session)


def _category_payload(**overrides) -> CategoryCreate:
    defaults = dict(
        name="Hair Care",
        slug="hair-care",
        types=[
            TypeCreate(
                name="Shampoo",
                slug="shampoo",
                sub_categories=[
                    SubCategoryCreate(name="Anti-Dandruff", slug="anti-dandruff"),
                    SubCategoryCreate(name="Colour Care", slug="colour-care"),
                ],
            ),
            TypeCreate(name="Oils", slug="oils"),
        ],
    )
    defaults.update(overrides)
    return CategoryCreate(**defaults)


class TestCreateCategory:
    def test_nested_create(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        db_session.commit()
        assert cat.slug == "hair-care"
        types = repo.list_types(category_id=cat.id)
        assert [t.slug for t in types] == ["oils", "shampoo"]
        subs = repo.list_subcategories(category_id=cat.id)
        assert {s.slug for s in subs} == {"anti-dandruff", "colour-care"}

    def test_duplicate_slug(self, repo, db_session):
        repo.create_category(_category_payload(types=[]))
        db_session.commit()
        with pytest.raises(SlugConflictError):
            repo.create_category(_category_payload(name="Hair Care 2", types=[]))

    def test_duplicate_name(self, repo, db_session):
        repo.create_category(_category_payload(types=[]))
        db_session.commit()
        with pytest.raises(NameConflictError):
            repo.create_category(_category_payload(slug="hair-care-2", types=[]))
        assert db_session.query(CategoryORM).count() == 1

    def test_duplicate_type_slugs_in_payload(self, repo):
        payload = _category_payload(types=[
            TypeCreate(name="A", slug="same"),
            TypeCreate(name="B", slug="same"),
        ])
        with pytest.raises(SlugConflictError):
            repo.create_category(payload)

    def test_list_is_ordered_by_name(self, repo, db_session):
        repo.create_category(CategoryCreate(name="Tools", slug="tools"))
        repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        db_session.commit()
        assert [c.name for c in repo.list_categories()] == ["Skin Care", "Tools"]


class TestCreateType:
    def test_resolve_category_by_slug(self, repo, db_session):
        cat = repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        t = repo.create_type(TypeCreate(name="Serum", slug="serum", category_slug="skin-care"))
        assert t.category_id == cat.id

    def test_resolve_category_by_name(self, repo):
        cat = repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        t = repo.create_type(TypeCreate(name="Serum", slug="serum", category_name="Skin Care"))
        assert t.category_id == cat.id

    def test_category_not_found(self, repo):
        with pytest.raises(NotFoundError):
            repo.create_type(TypeCreate(name="Serum", slug="serum", category_id="missing"))

    def test_category_required(self, repo):
        with pytest.raises(CatalogError):
            repo.create_type(TypeCreate(name="Serum", slug="serum"))

    def test_same_slug_in_other_category_is_allowed(self, repo):
        a = repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        b = repo.create_category(CategoryCreate(name="Hair Care", slug="hair-care"))
        repo.create_type(TypeCreate(name="General", slug="general", category_id=a.id))
        repo.create_type(TypeCreate(name="General", slug="general", category_id=b.id))
        assert len(repo.list_types()) == 2

    def test_same_slug_in_same_category_conflicts(self, repo):
        a = repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        repo.create_type(TypeCreate(name="General", slug="general", category_id=a.id))
        with pytest.raises(SlugConflictError):
            repo.create_type(TypeCreate(name="General again", slug="general", category_id=a.id))


class TestCreateSubCategory:
    def test_by_type_slug(self, repo):
        cat = repo.create_category(_category_payload())
        sub = repo.create_subcategory(SubCategoryCreate(name="Dry Hair", slug="dry-hair", type_slug="shampoo"))
        assert sub.type_id == repo.find_type(cat.id, "shampoo").id

    def test_type_not_found(self, repo):
        with pytest.raises(NotFoundError):
            repo.create_subcategory(SubCategoryCreate(name="X", slug="x", type_id="missing"))

    def test_conflict(self, repo):
        repo.create_category(_category_payload())
        with pytest.raises(SlugConflictError):
            repo.create_subcategory(
                SubCategoryCreate(name="Again", slug="anti-dandruff", type_slug="shampoo")
            )


class TestEnsureDefaults:
    def test_ensure_type_creates_then_adopts(self, repo, db_session):
        cat = repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        t1, created1 = repo.ensure_type(cat, "general", "General", "General Skin Care products")
        t2, created2 = repo.ensure_type(cat, "general", "Other name", "ignored")
        assert created1 is True
        assert created2 is False
        assert t1.id == t2.id
        assert t2.name == "General"
        assert db_session.query(TypeORM).count() == 1

    def test_ensure_subcategory(self, repo, db_session):
        cat = repo.create_category(CategoryCreate(name="Skin Care", slug="skin-care"))
        t, _ = repo.ensure_type(cat, "general", "General")
        s1, created1 = repo.ensure_subcategory(t, "all-products", "All Products")
        s2, created2 = repo.ensure_subcategory(t, "all-products", "All Products")
        assert (created1, created2) == (True, False)
        assert s1.id == s2.id
        assert db_session.query(SubCategoryORM).count() == 1


class TestAssignLegacyProducts:
    def test_only_fills_nulls(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        other_sub = repo.find_subcategory(repo.find_type(cat.id, "shampoo").id, "anti-dandruff")
        t, _ = repo.ensure_type(cat, "general", "General")
        target, _ = repo.ensure_subcategory(t, "all-products", "All Products")
        db_session.add_all([
            ProductORM(name="A", slug="a", category_id=cat.id),
            ProductORM(name="B", slug="b", category_id=cat.id),
            ProductORM(name="C", slug="c", category_id=cat.id, sub_category_id=other_sub.id),
            ProductORM(name="D", slug="d"),
        ])
        db_session.commit()

        updated = repo.assign_legacy_products(cat.id, target.id)
        db_session.commit()

        assert updated == 2
        by_slug = {p.slug: p.sub_category_id for p in db_session.query(ProductORM).all()}
        assert by_slug["a"] == target.id
        assert by_slug["b"] == target.id
        assert by_slug["c"] == other_sub.id
        assert by_slug["d"] is None
        assert repo.count_products() == 4
        assert repo.count_products_without_subcategory() == 1


class TestCategoryTree:
    def test_tree_with_counts(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        sub = repo.find_subcategory(repo.find_type(cat.id, "shampoo").id, "anti-dandruff")
        db_session.add_all([
            ProductORM(name="A", slug="a", category_id=cat.id, sub_category_id=sub.id),
            ProductORM(name="B", slug="b", category_id=cat.id),
        ])
        db_session.commit()

        tree = repo.category_tree()
        assert len(tree) == 1
        node = tree[0]
        assert node["slug"] == "hair-care"
        assert node["legacy_product_count"] == 2
        shampoo = next(t for t in node["types"] if t["slug"] == "shampoo")
        assert shampoo["product_count"] == 1
        assert [s["slug"] for s in shampoo["sub_categories"]] == ["anti-dandruff", "colour-care"]


class TestDelete:
    def test_delete_category_with_types_refused(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        db_session.commit()
        with pytest.raises(InUseError):
            repo.delete_category(cat.id)

    def test_delete_category_with_products_refused(self, repo, db_session):
        cat = repo.create_category(CategoryCreate(name="Tools", slug="tools"))
        db_session.add(ProductORM(name="Razor", slug="razor", category_id=cat.id))
        db_session.commit()
        with pytest.raises(InUseError, match="existing products"):
            repo.delete_category(cat.id)

    def test_delete_empty_category(self, repo, db_session):
        cat = repo.create_category(CategoryCreate(name="Tools", slug="tools"))
        db_session.commit()
        repo.delete_category(cat.id)
        db_session.commit()
        assert repo.get_category_by_slug("tools") is None

    def test_delete_missing(self, repo):
        with pytest.raises(NotFoundError):
            repo.delete_category("missing")
        with pytest.raises(NotFoundError):
            repo.delete_type("missing")
        with pytest.raises(NotFoundError):
            repo.delete_subcategory("missing")

    def test_delete_type_with_subcategories_refused(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        db_session.commit()
        shampoo = repo.find_type(cat.id, "shampoo")
        with pytest.raises(InUseError, match="2 subcategories"):
            repo.delete_type(shampoo.id)

    def test_delete_subcategory_with_products_refused(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        sub = repo.find_subcategory(repo.find_type(cat.id, "shampoo").id, "anti-dandruff")
        db_session.add(ProductORM(name="A", slug="a", sub_category_id=sub.id))
        db_session.commit()
        with pytest.raises(InUseError):
            repo.delete_subcategory(sub.id)

    def test_delete_empty_type(self, repo, db_session):
        cat = repo.create_category(_category_payload())
        db_session.commit()
        oils = repo.find_type(cat.id, "oils")
        repo.delete_type(oils.id)
        db_session.commit()
        assert repo.find_type(cat.id, "oils") is None
