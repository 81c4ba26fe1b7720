"""Database configuration and initialization."""
from flask import current_app
from sqlalchemy import BigInteger, Integer, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# BIGINT ids everywhere; SQLite only autoincrements INTEGER PRIMARY KEY
BigIntegerType = BigInteger().with_variant(Integer, 'sqlite')


class Database:
    """
    Explicit database handle: one engine plus a scoped session factory.

    Built by the app factory and stored in ``app.extensions['database']``.
    Blueprints fetch the session with ``get_session()`` and pass it down to
    the services, which never reach for global state.
    """

    def __init__(self, database_uri: str, echo: bool = False):
        self.database_uri = database_uri
        self.engine = _build_engine(database_uri, echo)
        self.session = scoped_session(
            sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        )

    def create_all(self):
        """Create every table known to the models package."""
        import order_service.models  # noqa: F401  (register mappers)
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        """Drop every table known to the models package."""
        import order_service.models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)

    def ping(self) -> bool:
        """Run a trivial query to validate connectivity."""
        row = self.session.execute(text("SELECT 1 as health_check")).fetchone()
        return bool(row and row[0] == 1)

    def remove(self, exception=None):
        """Close the request session and rollback on error."""
        if exception:
            self.session.rollback()
        self.session.remove()

    def dispose(self):
        self.session.remove()
        self.engine.dispose()


def _build_engine(database_uri: str, echo: bool) -> Engine:
    """Create the engine with pool settings suited to the backend."""
    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share a single connection across the app
        options = {'connect_args': {'check_same_thread': False}}
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            options['poolclass'] = StaticPool
        return create_engine(database_uri, echo=echo, **options)

    return create_engine(
        database_uri,
        echo=echo,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=10,
        max_overflow=20
    )


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY constraints unless asked per connection."""
    if type(dbapi_connection).__module__.startswith('sqlite3'):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def init_db(app) -> Database:
    """Initialize database connection for the app."""
    database = Database(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False)
    )
    app.extensions['database'] = database

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        database.remove(exception)

    return database


def get_database(app=None) -> Database:
    """Get the database handle bound to the (current) app."""
    app = app or current_app
    return app.extensions['database']


def get_session():
    """Get database session."""
    return get_database().session

