# storefront/domain/context.py
from dataclasses import dataclass

from storefront.domain.errors import AuthorizationError, NotAuthenticated


@dataclass(frozen=True)
class RequestContext:
    """Caller identity for one request; user_id is None for anonymous calls."""

    user_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user(self) -> int:
        if self.user_id is None:
            raise NotAuthenticated()
        return self.user_id

    def require_owner(self, owner_id: int) -> int:
        user_id = self.require_user()
        if owner_id != user_id:
            raise AuthorizationError()
        return user_id


ANONYMOUS = RequestContext()
