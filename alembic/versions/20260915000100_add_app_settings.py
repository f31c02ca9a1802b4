"""add app settings table"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260915000100"
down_revision = "20260901000100"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "app_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("scrape_timeout_seconds", sa.Integer(), nullable=False, server_default="90"),
        sa.Column("default_ticket_quantity", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("auto_ingest_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "enabled_ticket_apps",
            sa.String(),
            nullable=False,
            server_default="tickpick,gametime",
        ),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("app_settings")
