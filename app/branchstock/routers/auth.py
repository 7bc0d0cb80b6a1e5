from fastapi import APIRouter, Depends

from app.branchstock.core.deps import get_current_user
from app.branchstock.db.session import get_db
from app.branchstock.schemas.auth import LoginData, LoginRequest, LoginResponse, MeResponse, UserResponse
from app.branchstock.services.auth import AuthService

router = APIRouter()


def _user_response(user) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        branch_id=user.branch_id,
    )


@router.post("/login", response_model=LoginResponse, summary="Login (JSON)")
def login(payload: LoginRequest, db=Depends(get_db)):
    user, token = AuthService(db).login(payload.email, payload.password)
    return LoginResponse(data=LoginData(token=token, user=_user_response(user)))


@router.get("/me", response_model=MeResponse)
def me(current_user=Depends(get_current_user)):
    return MeResponse(data=_user_response(current_user))
