from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_apis"
down_revision = None
branch_labels = None
depends_on = None


def _json(name: str) -> sa.Column:
    return sa.Column(name, postgresql.JSONB(astext_type=sa.Text()), nullable=True)


def upgrade():
    op.create_table(
        "apis",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("group_name", sa.String(length=120), nullable=True),
        sa.Column("authentication_type", sa.String(length=40), nullable=True),
        sa.Column("method_type", sa.String(length=10), nullable=False, server_default="GET"),
        sa.Column("response_type", sa.String(length=20), nullable=False, server_default="json"),

        sa.Column("api_key_authentication_key", sa.LargeBinary(), nullable=True),
        sa.Column("api_key_authentication_header_name", sa.LargeBinary(), nullable=True),
        sa.Column("basic_authentication_username", sa.LargeBinary(), nullable=True),
        sa.Column("basic_authentication_password", sa.LargeBinary(), nullable=True),

        sa.Column("basic_and_bearer_authentication_method_type", sa.String(length=10), nullable=True),
        sa.Column("basic_and_bearer_authentication_url", sa.Text(), nullable=True),
        _json("basic_and_bearer_authentication_query_parameter_map"),
        _json("basic_and_bearer_authentication_header_map"),
        _json("basic_and_bearer_authentication_body"),
        _json("basic_and_bearer_authentication_token_extractor_list"),
        _json("basic_and_bearer_authentication_expiration_extractor_list"),
        sa.Column("basic_and_bearer_authentication_expiration_buffer", sa.Integer(), nullable=True),

        sa.Column("bearer_authentication_token", sa.LargeBinary(), nullable=True),

        sa.Column("oauth_authentication_grant_type", sa.String(length=40), nullable=True),
        sa.Column("oauth_authentication_client_id", sa.LargeBinary(), nullable=True),
        sa.Column("oauth_authentication_client_secret", sa.LargeBinary(), nullable=True),
        sa.Column("oauth_authentication_token_url", sa.Text(), nullable=True),
        sa.Column("oauth_authentication_authorization_url", sa.Text(), nullable=True),
        sa.Column("oauth_authentication_redirect_url", sa.Text(), nullable=True),
        sa.Column("oauth_authentication_scope", sa.Text(), nullable=True),
        _json("oauth_authentication_access_token_extractor_list"),
        _json("oauth_authentication_refresh_token_extractor_list"),
        _json("oauth_authentication_expiration_extractor_list"),
        sa.Column("oauth_authentication_expiration_buffer", sa.Integer(), nullable=True),
        sa.Column("oauth_authentication_pkce_enabled", sa.Boolean(), nullable=True),
        _json("oauth_authentication_additional_parameter_map"),

        sa.Column("url", sa.Text(), nullable=False),
        _json("query_parameter_map"),
        _json("header_map"),
        _json("body"),
        sa.Column("is_api_active", sa.Boolean(), nullable=False, server_default=sa.true()),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),

        sa.UniqueConstraint("name", name="uq_apis_name"),
    )

    op.create_index("ix_apis_group_name", "apis", ["group_name"])


def downgrade():
    op.drop_index("ix_apis_group_name", table_name="apis")
    op.drop_table("apis")
