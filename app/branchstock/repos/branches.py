from sqlalchemy import select

from app.branchstock.db.models import Branch


class BranchRepository:
    def __init__(self, db):
        self.db = db

    def get(self, branch_id: str) -> Branch | None:
        return self.db.get(Branch, branch_id)

    def list_active(self) -> list[Branch]:
        return self.db.execute(select(Branch).where(Branch.is_active.is_(True)).order_by(Branch.name)).scalars().all()
