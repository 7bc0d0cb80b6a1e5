import logging

from sqlalchemy import select

from app.branchstock.core.config import settings
from app.branchstock.core.logging import configure_logging, log_json
from app.branchstock.core.security import get_password_hash
from app.branchstock.db.models import Branch, User

logger = logging.getLogger("branchstock.seed")


def _parse_branches(raw: str) -> list[tuple[str, str]]:
    branches = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        branch_id, _, name = chunk.partition(":")
        branches.append((branch_id.strip(), (name or branch_id).strip()))
    return branches


def _get_or_create_branches(db) -> list[Branch]:
    existing = {branch.id: branch for branch in db.execute(select(Branch)).scalars().all()}
    created = []
    for branch_id, name in _parse_branches(settings.DEFAULT_BRANCHES):
        if branch_id in existing:
            continue
        branch = Branch(id=branch_id, name=name)
        db.add(branch)
        created.append(branch)
    db.flush()
    return created


def _get_or_create_owner(db) -> User:
    owner = db.execute(select(User).where(User.email == settings.OWNER_EMAIL)).scalars().first()
    if owner:
        return owner
    owner = User(
        email=settings.OWNER_EMAIL,
        full_name=settings.OWNER_FULL_NAME,
        hashed_password=get_password_hash(settings.OWNER_PASSWORD),
        role="owner",
        branch_id=None,
        is_active=True,
    )
    db.add(owner)
    db.flush()
    return owner


def run_seed(db) -> None:
    created = _get_or_create_branches(db)
    owner = _get_or_create_owner(db)
    db.commit()
    log_json(
        logger,
        {
            "event": "seed.completed",
            "branches_created": [branch.id for branch in created],
            "owner_email": owner.email,
        },
    )


if __name__ == "__main__":
    from app.branchstock.db.session import SessionLocal

    configure_logging()
    with SessionLocal() as session:
        run_seed(session)
