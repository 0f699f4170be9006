import structlog
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.errors import Conflict, NotFound, Unauthenticated
from shared.security import AuthenticatedUser, AuthGateway

from .models import User
from .repository import UserRepository
from .schemas import LoginResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)


def build_password_context(settings: Settings) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


class AuthService:
    """Registration, login and profile lookup for bookstore users."""

    def __init__(self, pwd_context: CryptContext, gateway: AuthGateway):
        self._pwd_context = pwd_context
        self._gateway = gateway

    def _hash_password(self, password: str) -> str:
        return self._pwd_context.hash(password)

    def _verify_password(self, plain: str, hashed: str) -> bool:
        return self._pwd_context.verify(plain, hashed)

    async def register(self, db: AsyncSession, data: UserCreate) -> User:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise Conflict("Email has already been used.")

        user = User(
            email=data.email,
            username=data.username,
            password=self._hash_password(data.password),
        )
        try:
            user = await UserRepository.create(db, user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email
            await db.rollback()
            raise Conflict("Email has already been used.") from exc

        logger.info("user_registered", user_id=user.id)
        return user

    async def login(self, db: AsyncSession, data: UserLogin) -> LoginResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not self._verify_password(data.password, user.password):
            logger.info("login_rejected", email=data.email)
            raise Unauthenticated("Invalid credentials.")

        token = self._gateway.create_access_token(
            AuthenticatedUser(id=user.id, email=user.email, username=user.username)
        )
        return LoginResponse(
            id=user.id,
            email=user.email,
            username=user.username,
            access_token=token,
        )

    async def get_user_by_id(self, db: AsyncSession, user_id: str) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise NotFound("User profile not found.")
        return user
