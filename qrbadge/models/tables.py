# =======================================================================================
# qrbadge/models/tables.py - Table Definitions
# =======================================================================================
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, MetaData, String, Table, func,
)

metadata = MetaData()

badges = Table(
    "badges",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("qr_code", String(100), nullable=False, unique=True),
    Column("name", String(255)),
    Column("device_brand", String(50)),
    Column("device_model", String(100)),
    Column("validation_time", DateTime),
    Column("expiration_time", DateTime, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

accesses = Table(
    "accesses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("badge_id", Integer, ForeignKey("badges.id"), nullable=False, index=True),
    Column("ip_address", String(64)),
    Column("user_agent", String(512)),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("role", String(50), nullable=False, server_default="user"),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)
