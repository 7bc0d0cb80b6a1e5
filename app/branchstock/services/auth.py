from app.branchstock.core.error_catalog import AppError, ErrorCatalog
from app.branchstock.core.security import create_user_access_token, verify_password
from app.branchstock.repos.users import UserRepository


class AuthService:
    def __init__(self, db):
        self.repo = UserRepository(db)

    def login(self, email: str, password: str):
        user = self.repo.get_by_email(email)
        if user is None or not user.is_active:
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        if not verify_password(password, user.hashed_password):
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS)
        user = self.repo.touch_last_login(user)
        return user, create_user_access_token(user)
