"""Create user directory tables, views and row-set functions

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-11-01 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1c2a9d7b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_companies"),
    )

    # users.default_membership_id is added after memberships exists
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "memberships",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_memberships_user_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_memberships_company_id_companies",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_memberships"),
        sa.UniqueConstraint(
            "user_id", "company_id", name="uq_memberships_user_company"
        ),
    )
    op.create_index("ix_memberships_user_id", "memberships", ["user_id"])
    op.create_index("ix_memberships_company_id", "memberships", ["company_id"])

    op.add_column(
        "users", sa.Column("default_membership_id", sa.Uuid(), nullable=True)
    )
    op.create_unique_constraint(
        "uq_users_default_membership_id", "users", ["default_membership_id"]
    )
    op.create_foreign_key(
        "fk_users_default_membership_id_memberships",
        "users",
        "memberships",
        ["default_membership_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("token_id", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "revoked", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("context", sa.String(length=8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_refresh_tokens_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_refresh_tokens"),
        sa.UniqueConstraint("token_id", name="uq_refresh_tokens_token_id"),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])
    op.create_index("ix_refresh_tokens_context", "refresh_tokens", ["context"])

    connection = op.get_bind()
    connection.execute(
        sa.text(
            """
        CREATE VIEW v_user_memberships AS
        SELECT
            u.id AS user_id,
            u.email AS user_email,
            u.first_name AS user_first_name,
            u.last_name AS user_last_name,
            u.phone AS user_phone,
            u.created_at AS user_created_at,
            u.updated_at AS user_updated_at,
            u.role AS user_role,
            m.role AS membership_role,
            m.company_id AS company_id
        FROM memberships m
        JOIN users u ON u.id = m.user_id
    """
        )
    )
    connection.execute(
        sa.text(
            """
        CREATE VIEW v_user_refresh_tokens AS
        SELECT
            t.id AS refresh_token_id,
            t.user_id AS user_id,
            t.token_id AS token_identifier,
            t.expires_at AS expires_at,
            t.revoked AS is_revoked,
            t.created_at AS created_at,
            t.context AS token_context
        FROM refresh_tokens t
    """
        )
    )
    connection.execute(
        sa.text(
            """
        CREATE FUNCTION sp_get_user_memberships(p_company_id uuid)
        RETURNS SETOF v_user_memberships
        LANGUAGE sql STABLE
        AS $$
            SELECT *
            FROM v_user_memberships
            WHERE company_id = p_company_id
            ORDER BY user_last_name ASC, user_first_name ASC
        $$
    """
        )
    )
    connection.execute(
        sa.text(
            """
        CREATE FUNCTION sp_get_user_refresh_tokens(p_user_id uuid)
        RETURNS SETOF v_user_refresh_tokens
        LANGUAGE sql STABLE
        AS $$
            SELECT *
            FROM v_user_refresh_tokens
            WHERE user_id = p_user_id
            ORDER BY created_at DESC
        $$
    """
        )
    )


def downgrade() -> None:
    connection = op.get_bind()
    connection.execute(sa.text("DROP FUNCTION IF EXISTS sp_get_user_refresh_tokens"))
    connection.execute(sa.text("DROP FUNCTION IF EXISTS sp_get_user_memberships"))
    connection.execute(sa.text("DROP VIEW IF EXISTS v_user_refresh_tokens"))
    connection.execute(sa.text("DROP VIEW IF EXISTS v_user_memberships"))

    op.drop_index("ix_refresh_tokens_context", table_name="refresh_tokens")
    op.drop_index("ix_refresh_tokens_user_id", table_name="refresh_tokens")
    op.drop_table("refresh_tokens")

    op.drop_constraint(
        "fk_users_default_membership_id_memberships", "users", type_="foreignkey"
    )
    op.drop_constraint("uq_users_default_membership_id", "users", type_="unique")
    op.drop_column("users", "default_membership_id")

    op.drop_index("ix_memberships_company_id", table_name="memberships")
    op.drop_index("ix_memberships_user_id", table_name="memberships")
    op.drop_table("memberships")
    op.drop_table("users")
    op.drop_table("companies")
