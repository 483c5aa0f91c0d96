"""Authentication service - registration, login and user lookup."""
import logging
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from app.exceptions import NotFoundError, ValidationError
from app.models.user import User, UserCreate
from app.utils.auth import create_access_token, hash_password, token_expiry, verify_password
from app.utils.dates import utc_now

logger = logging.getLogger(__name__)


def _doc_to_user(doc: dict) -> User:
    return User(
        _id=str(doc["_id"]),
        username=doc["username"],
        email=doc["email"],
        name=doc.get("name", ""),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class AuthService:
    """Service for handling user authentication."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    async def register_user(self, user_create: UserCreate) -> User:
        """
        Register a new user.

        Usernames are matched case-insensitively, emails are stored lowercase.

        Raises:
            ValidationError: If username or email is already registered
        """
        username = user_create.username.strip()
        email = user_create.email.lower()

        if await self.users.find_one({"username_lower": username.lower()}):
            raise ValidationError("Username already taken")
        if await self.users.find_one({"email": email}):
            raise ValidationError("Email already registered")

        now = utc_now()
        user_doc = {
            "username": username,
            "username_lower": username.lower(),
            "email": email,
            "name": user_create.name,
            "hashed_password": hash_password(user_create.password),
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.users.insert_one(user_doc)
        except DuplicateKeyError as e:
            # Lost a race with a concurrent registration
            key_pattern = (e.details or {}).get("keyPattern", {})
            if "email" in key_pattern:
                raise ValidationError("Email already registered")
            raise ValidationError("Username already taken")

        user_doc["_id"] = result.inserted_id

        logger.info("Registered user %s", result.inserted_id)
        return _doc_to_user(user_doc)

    async def login(self, login: str, password: str) -> tuple[str, datetime]:
        """
        Check credentials and issue an access token.

        Args:
            login: Username or email
            password: Plain text password

        Returns:
            Tuple of (JWT access token, expiry time)

        Raises:
            ValueError: If credentials are invalid
        """
        login = login.strip()
        if "@" in login:
            query = {"email": login.lower()}
        else:
            query = {"username_lower": login.lower()}

        user_doc = await self.users.find_one(query)
        if not user_doc or not verify_password(password, user_doc["hashed_password"]):
            logger.info("Failed login attempt")
            raise ValueError("Invalid username or password")

        expires_at = token_expiry()
        token = create_access_token(user_id=str(user_doc["_id"]), expires_at=expires_at)
        return token, expires_at

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If user not found
        """
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            raise NotFoundError("User not found")

        user_doc = await self.users.find_one({"_id": object_id})
        if not user_doc:
            raise NotFoundError("User not found")

        return _doc_to_user(user_doc)
