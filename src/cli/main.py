# src/cli/main.py
from __future__ import annotations

import logging
import sys

import click

logger = logging.getLogger("storefront")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@click.group()
@click.option("--log-level", default="INFO", help="Logging level")
def cli(log_level: str):
    """Storefront catalog maintenance commands"""
    _setup_logging(log_level)


@cli.command("init-db")
def init_db():
    """Create any missing tables."""
    from src.storage.database import get_engine
    from src.storage.orm_models import Base

    Base.metadata.create_all(get_engine())
    click.echo("Database tables are in place.")


@cli.command("backfill-taxonomy")
def backfill_taxonomy():
    """Attach every legacy category's products to a default Type/SubCategory."""
    from src.pipeline.taxonomy_backfill import TaxonomyBackfill
    from src.storage.database import get_engine
    from sqlalchemy.orm import Session as SASession

    click.echo("Starting taxonomy backfill...")
    engine = get_engine()
    try:
        with SASession(engine) as session:
            report = TaxonomyBackfill(session).run()
    except Exception as e:
        logger.error("Taxonomy backfill failed: %s", e)
        click.echo(f"Migration failed: {e}", err=True)
        sys.exit(1)

    for result in report.categories:
        click.echo("")
        for line in result.lines():
            click.echo(line)

    click.echo(f"\n{'='*60}")
    click.echo("Taxonomy backfill completed")
    click.echo(f"{'='*60}")
    for line in report.summary_lines():
        click.echo(line)


@cli.command()
def catalog():
    """Print the category / type / subcategory tree."""
    from src.storage.database import get_engine
    from src.storage.repository import CatalogRepository
    from sqlalchemy.orm import Session as SASession

    with SASession(get_engine()) as session:
        tree = CatalogRepository(session).category_tree()

    if not tree:
        click.echo("No categories found.")
        return

    for cat in tree:
        click.echo(f"{cat['name']} [{cat['slug']}] legacy products: {cat['legacy_product_count']}")
        for t in cat["types"]:
            click.echo(f"  {t['name']} [{t['slug']}] ({t['product_count']})")
            for s in t["sub_categories"]:
                click.echo(f"    {s['name']} [{s['slug']}] ({s['product_count']})")


@cli.command("seed-concerns")
def seed_concerns():
    """Insert the default skin and hair concerns that are missing."""
    from src.core.taxonomy import DEFAULT_CONCERNS
    from src.storage.database import get_engine
    from src.storage.store_repository import ConcernRepository
    from sqlalchemy.orm import Session as SASession

    click.echo("Seeding concerns...")
    with SASession(get_engine()) as session:
        created = ConcernRepository(session).seed(DEFAULT_CONCERNS)
        session.commit()
    click.echo(f"Seeding finished: {created} created, {len(DEFAULT_CONCERNS) - created} already present.")


@cli.command()
def settings():
    """Show the store settings, creating the defaults on first use."""
    from src.storage.database import get_engine
    from src.storage.store_repository import SettingsRepository
    from sqlalchemy.orm import Session as SASession

    with SASession(get_engine()) as session:
        s = SettingsRepository(session).get()
        session.commit()
        rows = [
            ("Store name", s.store_name),
            ("Contact email", s.contact_email or "-"),
            ("Currency", s.currency),
            ("Shipping fee", f"{s.shipping_fee:.2f}"),
            ("Free shipping from", f"{s.free_shipping_threshold:.2f}" if s.free_shipping_threshold is not None else "-"),
            ("Tax rate", f"{s.tax_rate:g}%"),
        ]

    for label, value in rows:
        click.echo(f"{label:<20} {value}")


@cli.command("quote-offer")
@click.option("--code", required=True, help="Offer code")
@click.option("--cart-total", type=float, required=True, help="Cart total before discount")
def quote_offer(code: str, cart_total: float):
    """Check an offer code against a cart total."""
    from src.core.offers import OfferError, quote_offer as _quote
    from src.storage.database import get_engine
    from src.storage.store_repository import OfferRepository
    from sqlalchemy.orm import Session as SASession

    with SASession(get_engine()) as session:
        offer = OfferRepository(session).get_by_code(code)
        try:
            quote = _quote(offer, cart_total)
        except OfferError as e:
            click.echo(f"Rejected ({e.code}): {e.message}", err=True)
            sys.exit(1)

    click.echo(f"Offer:    {quote.name} ({quote.code})")
    click.echo(f"Discount: {quote.discount:.2f}")
    click.echo(f"Total:    {quote.final_amount:.2f}")


if __name__ == "__main__":
    cli()
