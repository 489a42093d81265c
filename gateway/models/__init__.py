from gateway.models.base import Base  # noqa: F401

from gateway.models.api import Api  # noqa: F401
