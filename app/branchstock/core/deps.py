from uuid import UUID

from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.branchstock.core.error_catalog import AppError, ErrorCatalog
from app.branchstock.core.scope import BranchAccessPolicy
from app.branchstock.core.security import TokenData, decode_token, oauth2_scheme
from app.branchstock.db.session import get_db
from app.branchstock.repos.users import UserRepository


def get_current_token_data(token: str | None = Depends(oauth2_scheme)) -> TokenData:
    if not token:
        raise AppError(ErrorCatalog.UNAUTHORIZED)
    try:
        payload = decode_token(token)
        return TokenData(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.UNAUTHORIZED) from exc


def get_current_user(
    request: Request,
    token_data: TokenData = Depends(get_current_token_data),
    db=Depends(get_db),
):
    try:
        user_id = UUID(token_data.sub)
    except ValueError as exc:
        raise AppError(ErrorCatalog.UNAUTHORIZED) from exc

    user = UserRepository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        raise AppError(ErrorCatalog.UNAUTHORIZED)
    request.state.user_id = str(user.id)
    request.state.branch_id = user.branch_id
    request.state.role = user.role
    return user


def get_branch_policy() -> BranchAccessPolicy:
    return BranchAccessPolicy()


__all__ = [
    "get_current_token_data",
    "get_current_user",
    "get_branch_policy",
]
