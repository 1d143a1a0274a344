"""SQLAlchemy metadata definitions for carvalue-auth tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("email", sa.Text(), nullable=False),
    sa.Column("password", sa.Text(), nullable=False),
    sa.UniqueConstraint("email", name="uq_users_email"),
)
