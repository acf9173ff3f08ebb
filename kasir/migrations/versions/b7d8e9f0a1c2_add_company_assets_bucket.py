"""add_company_assets_bucket

Revision ID: b7d8e9f0a1c2
Revises: a1c2e3f4b5d6
Create Date: 2025-06-24 02:43:05.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "b7d8e9f0a1c2"
down_revision: Union[str, None] = "a1c2e3f4b5d6"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    buckets = op.create_table(
        "storage_buckets",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("file_size_limit", sa.BigInteger(), nullable=True),
        sa.Column("allowed_mime_types", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "storage_objects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "bucket_id", sa.String(100), sa.ForeignKey("storage_buckets.id"), nullable=False
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("bucket_id", "name", name="uq_storage_object_bucket_name"),
    )
    op.create_index("ix_storage_objects_bucket", "storage_objects", ["bucket_id"])

    # Public-read bucket for brand assets; uploads, updates and deletes are
    # restricted to authenticated sessions by the assets service.
    op.bulk_insert(
        buckets,
        [
            {
                "id": "company-assets",
                "name": "company-assets",
                "public": True,
                "file_size_limit": 5242880,  # 5MB
                "allowed_mime_types": [
                    "image/jpeg",
                    "image/png",
                    "image/gif",
                    "image/webp",
                ],
            }
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_storage_objects_bucket", table_name="storage_objects")
    op.drop_table("storage_objects")
    op.drop_table("storage_buckets")
