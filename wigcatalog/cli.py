"""Flask CLI commands for admin operations."""
from decimal import Decimal
import click

# (name, display_name, color_category)
DEMO_COLORS = [
    ("black", "Чорний", 1),
    ("brown", "Каштановий", 1),
    ("blonde", "Блонд", 2),
    ("red", "Рудий", 3),
]

LENGTH_CM = {"SHORT": 12, "MEDIUM": 25, "LONG": 55}

# (name, category, type, length bucket, description, [(color, price, promo, stock)])
DEMO_PRODUCTS = [
    ("Гламурна класика", 1, 1, "LONG",
     "Натуральна довга перука з глибоким об’ємом, підходить для урочистих подій.",
     [("black", 6000, 4500, 3), ("brown", 6000, 4600, 2), ("blonde", 6000, 4700, 0)]),
    ("Мальвіна", 1, 2, "MEDIUM",
     "Синтетична перука середньої довжини у різних відтінках для щоденного носіння.",
     [("black", 6000, 3800, 5), ("blonde", 6000, 3900, 4)]),
    ("Рудий акцент", 1, 1, "MEDIUM",
     "Яскрава рудувата перука з натурального волосся для сміливого стилю.",
     [("red", 6000, 4200, 1)]),
    ("Короткий чорний шик", 1, 2, "SHORT",
     "Сучасна коротка модель чорного кольору, легка у догляді.",
     [("black", 6000, 3200, 7)]),
    ("Класичний хвіст", 2, 2, "LONG",
     "Довгий синтетичний хвіст для швидкої зміни стилю.",
     [("black", 6000, 1500, 10), ("brown", 6000, 1600, 8)]),
    ("Світлий високий хвіст", 2, 2, "MEDIUM",
     "Світлий хвіст середньої довжини для святкових зачісок.",
     [("blonde", 6000, 1700, 6)]),
    ("Рудий об’єм", 2, 1, "LONG",
     "Об’ємний рудий хвіст з натурального волосся.",
     [("red", 6000, 2100, 0)]),
    ("Топер чорний об’ємний", 3, 1, "MEDIUM",
     "Натуральний топер чорного кольору для додаткового об’єму.",
     [("black", 6000, 2700, 2)]),
    ("Блонд-топер прямий", 3, 2, "SHORT",
     "Синтетичний блонд-топер короткої довжини для щоденного використання.",
     [("blonde", 6000, 2500, 4), ("red", 6000, 2600, 3)]),
    ("Коричневий топер з чубчиком", 3, 1, "SHORT",
     "Натуральний топер із чубчиком, доступний у темних відтінках.",
     [("brown", 6000, 3100, 2), ("black", 6000, 3150, 0)]),
]

CATEGORY_NAMES = {1: "WIGS", 2: "TAILS", 3: "TOPPERS"}


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        from wigcatalog.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo colors, products and variants (idempotent)."""
        from wigcatalog.extensions import db
        from wigcatalog.models import Color, Product, Variant

        # Only seed if no products exist yet
        if Product.query.first():
            click.echo("Products already exist — skipping demo seed.")
            return

        for name, display_name, category in DEMO_COLORS:
            if not Color.query.filter_by(name=name).first():
                db.session.add(
                    Color(name=name, display_name=display_name, color_category=category)
                )

        for name, category, ptype, bucket, description, variants in DEMO_PRODUCTS:
            product = Product(
                name=name,
                display_name=name,
                description=description,
                short_description=description.split(",")[0],
                category_id=category,
                type=ptype,
                length=LENGTH_CM[bucket],
                base_price=Decimal(variants[0][1]),
                base_promo_price=Decimal(variants[0][2]),
            )
            db.session.add(product)
            db.session.flush()  # get product.id
            for color, price, promo, stock in variants:
                db.session.add(
                    Variant(
                        product_id=product.id,
                        color=color,
                        price=Decimal(price),
                        promo_price=Decimal(promo),
                        stock_quantity=stock,
                    )
                )
        db.session.commit()
        click.echo(
            f"Seeded {len(DEMO_COLORS)} colors and {len(DEMO_PRODUCTS)} demo products."
        )

    @app.cli.command("stats")
    def stats():
        """Show product counts by category."""
        from wigcatalog.services.product_service import get_stats

        s = get_stats()
        total = sum(s.values())
        click.echo(f"Total products: {total}")
        for category, count in sorted(s.items(), key=lambda kv: kv[0] or 0):
            click.echo(f"  {CATEGORY_NAMES.get(category, 'UNSET')}: {count}")

    @app.cli.command("flush-cache")
    def flush_cache():
        """Drop every cached catalog listing and product."""
        from wigcatalog.services.cache_service import invalidate_catalog

        removed = invalidate_catalog()
        click.echo(f"Removed {removed} cached entries.")
