"""
User directory: registration and lookups.

Admission status is never touched here; it only changes through
core.state_machine.AdmissionStateMachine.
"""
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import AdmissionStatus, Role, User
from core.exceptions import Invalid, UserNotFound
from database import transactional


@transactional
def register_user(db: Session, name: str, email: str) -> User:
    """Create a participant in the pending state."""
    user = User(
        name=name,
        email=email,
        role=Role.PARTICIPANT,
        admission_status=AdmissionStatus.PENDING,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        raise Invalid(f"A user with email {email} already exists")
    return user


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound(user_id)
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at).all()
