# storefront/services/user_service.py
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotAuthenticated, NotFound, ValidationError
from storefront.repos.base import Storage
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.security import create_access_token, hash_password, verify_password

logger = get_logger(__name__)


class UserService:
    def __init__(self, storage: Storage, notifications: NotificationService | None = None):
        self.repo = storage.users
        self.notifications = notifications or NotificationService()

    def register(self, username: str, email: str, password: str, phone: str | None = None) -> UserModel:
        email = email.strip().lower()
        if self.repo.get_by_email(email):
            raise ValidationError("User with this email already exists")
        if self.repo.get_by_username(username):
            raise ValidationError("Username is already taken")

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            phone=phone,
        )
        created = self.repo.create_user(user)
        logger.info(f"User {created.id} registered")

        self.notifications.notify_welcome(created)
        return created

    def login(self, email: str, password: str) -> tuple[UserModel, str]:
        user = self.repo.get_by_email(email.strip().lower())
        if not user or not verify_password(password, user.password_hash):
            raise NotAuthenticated("Invalid email or password")
        return user, create_access_token(user.id)

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User", user_id)
        return user
