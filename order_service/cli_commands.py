"""
Flask CLI commands for database management.

Commands:
- flask init-db: Create all tables (--drop to recreate them)
- flask seed: Recreate the schema and load demo data from a JSON file
- flask low-stock: List products at or below LOW_STOCK_THRESHOLD
"""

import json

import click
from flask import current_app

from order_service.database import get_database
from order_service.models import Product


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables first')
    def init_db_command(drop):
        """Create the database schema."""
        database = get_database()
        if drop:
            click.confirm('Esto eliminará TODOS los datos. ¿Continuar?', abort=True)
            database.drop_all()
            click.echo(click.style('Tablas eliminadas.', fg='yellow'))
        database.create_all()
        click.echo(click.style('✅ Esquema de base de datos creado.', fg='green'))

    @app.cli.command('seed')
    @click.option('--file', 'seed_file', type=click.Path(exists=True, dir_okay=False),
                  default=None, help='JSON con suppliers, products y orders')
    @click.option('--yes', is_flag=True, help='No pedir confirmación')
    def seed_command(seed_file, yes):
        """Drop, recreate and load demo data."""
        from order_service.services.seed_service import load_seed_data

        seed_file = seed_file or current_app.config['SEED_FILE']
        with open(seed_file, encoding='utf-8') as fh:
            data = json.load(fh)

        if not yes:
            click.confirm('El seed recrea todas las tablas. ¿Continuar?', abort=True)

        database = get_database()
        database.drop_all()
        database.create_all()

        try:
            counts = load_seed_data(database.session, data)
        except Exception as e:
            click.echo(click.style(f'❌ Error durante el seed: {e}', fg='red'))
            raise SystemExit(1)
        finally:
            database.session.remove()

        click.echo(click.style('✅ Datos de ejemplo cargados', fg='green', bold=True))
        for table, count in counts.items():
            click.echo(f'   {table}: {count}')

    @app.cli.command('low-stock')
    @click.option('--threshold', type=int, default=None, help='Override LOW_STOCK_THRESHOLD')
    def low_stock_command(threshold):
        """List products whose stock is at or below the threshold."""
        if threshold is None:
            threshold = current_app.config['LOW_STOCK_THRESHOLD']

        session = get_database().session
        products = session.query(Product).filter(
            Product.stock <= threshold
        ).order_by(Product.stock, Product.name).all()

        if not products:
            click.echo(f'Sin productos con stock <= {threshold}')
            return

        for product in products:
            click.echo(f'{product.code_product:<12} {product.name:<40} stock={product.stock}')
