"""Link cloned products to their catalog source

Revision ID: qm002_catalog_product
Revises: qm001_initial
Create Date: 2026-04-02
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "qm002_catalog_product"
down_revision = "qm001_initial"
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("products", schema=None) as batch_op:
        batch_op.add_column(sa.Column("catalog_product_id", sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            "fk_products_catalog_product_id", "products", ["catalog_product_id"], ["id"]
        )
        batch_op.create_index("ix_products_catalog_product_id", ["catalog_product_id"], unique=False)


def downgrade():
    with op.batch_alter_table("products", schema=None) as batch_op:
        batch_op.drop_index("ix_products_catalog_product_id")
        batch_op.drop_constraint("fk_products_catalog_product_id", type_="foreignkey")
        batch_op.drop_column("catalog_product_id")
