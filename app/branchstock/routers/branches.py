from fastapi import APIRouter, Depends

from app.branchstock.core.deps import get_current_user
from app.branchstock.db.session import get_db
from app.branchstock.repos.branches import BranchRepository
from app.branchstock.schemas.branches import BranchListResponse, BranchResponse

router = APIRouter()


@router.get("/api/branches", response_model=BranchListResponse)
def list_branches(_user=Depends(get_current_user), db=Depends(get_db)):
    branches = BranchRepository(db).list_active()
    return BranchListResponse(
        data=[
            BranchResponse(
                id=branch.id,
                name=branch.name,
                address=branch.address,
                phone=branch.phone,
                is_active=branch.is_active,
                created_at=branch.created_at,
            )
            for branch in branches
        ]
    )
