from logging.config import fileConfig
from alembic import context

from config import get_sync_engine
from models import Base

# tables created by the Supabase platform itself, never by PolloPollo
SUPABASE_TABLES = {"schema_migrations", "supabase_migrations"}

alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)


def include_object(object, name, type_, reflected, compare_to):
    return not (type_ == "table" and name in SUPABASE_TABLES)


def configure_context(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        include_object=include_object,
        compare_type=True,
        **kwargs
    )


def run_migrations_offline() -> None:
    """Write the PolloPollo schema changes as SQL for DATABASE_URL's dialect"""
    url = get_sync_engine().url.render_as_string(hide_password=False)
    configure_context(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the PolloPollo schema changes through the psycopg2 engine from config"""
    with get_sync_engine().connect() as connection:
        configure_context(connection=connection)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
