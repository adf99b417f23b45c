# alembic/env.py

import sys
import os

from logging.config import fileConfig

from sqlalchemy import pool
from alembic import context
from dotenv import load_dotenv

# --- Загрузка переменных окружения из .env ---
load_dotenv()

# --- Корень проекта в sys.path, чтобы импортировался пакет cocopik ---
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# --- Импортируем Base и ВСЕ МОДЕЛИ ---
from cocopik.db import Base, DATABASE_URL, make_engine
from cocopik.models import (  # noqa: F401
    user,
    group,
    group_member,
    # если будут новые модели - обязательно допиши сюда!
)

# --- Конфигурируем Alembic ---
config = context.config

# --- Логирование Alembic ---
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# --- Строка подключения та же, что у приложения (DATABASE_URL или локальный SQLite) ---
db_url = DATABASE_URL


def run_migrations_offline():
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=db_url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    if db_url.startswith("sqlite"):
        connectable = make_engine(db_url)
    else:
        from sqlalchemy import create_engine
        connectable = create_engine(db_url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=db_url.startswith("sqlite"),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
