from sqlalchemy import Boolean, Integer, LargeBinary, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from gateway.models.base import Base, AuditMixin


class Api(AuditMixin, Base):
    """
    One externally registered API the gateway can call.

    Credential columns are LargeBinary holding the hex text of an AES-256-CBC
    ciphertext; they are decrypted per call, never written back.
    """

    __tablename__ = "apis"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    group_name: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)

    # "API Key" | "Basic" | "Bearer" | "Basic And Bearer" | "OAuth" | NULL (no auth)
    authentication_type: Mapped[str | None] = mapped_column(String(40), nullable=True)

    method_type: Mapped[str] = mapped_column(String(10), nullable=False, default="GET")
    # "json" | "text" | "arraybuffer" | "blob" | "document"
    response_type: Mapped[str] = mapped_column(String(20), nullable=False, default="json")

    # API Key
    api_key_authentication_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    api_key_authentication_header_name: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    # Basic (also the credentials of the Basic And Bearer exchange call)
    basic_authentication_username: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    basic_authentication_password: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    # Basic And Bearer
    basic_and_bearer_authentication_method_type: Mapped[str | None] = mapped_column(String(10), nullable=True)
    basic_and_bearer_authentication_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    basic_and_bearer_authentication_query_parameter_map: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    basic_and_bearer_authentication_header_map: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    basic_and_bearer_authentication_body: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    basic_and_bearer_authentication_token_extractor_list: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    basic_and_bearer_authentication_expiration_extractor_list: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    basic_and_bearer_authentication_expiration_buffer: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Bearer
    bearer_authentication_token: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    # OAuth
    oauth_authentication_grant_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    oauth_authentication_client_id: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    oauth_authentication_client_secret: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    oauth_authentication_token_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    oauth_authentication_authorization_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    oauth_authentication_redirect_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    oauth_authentication_scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    oauth_authentication_access_token_extractor_list: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    oauth_authentication_refresh_token_extractor_list: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    oauth_authentication_expiration_extractor_list: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    oauth_authentication_expiration_buffer: Mapped[int | None] = mapped_column(Integer, nullable=True)
    oauth_authentication_pkce_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    oauth_authentication_additional_parameter_map: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    # Target call
    url: Mapped[str] = mapped_column(Text, nullable=False)
    query_parameter_map: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    header_map: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    body: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    is_api_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
