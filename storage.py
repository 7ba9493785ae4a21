"""Data-access helpers over a SQLModel session.

Every function takes the request-scoped ``Session`` as its first argument and
commits its own writes. Nothing here knows about HTTP.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from models import AuthSession, FinancialProfile, Transaction, User
from utils import utcnow


def save_and_refresh(session: Session, instance):
    """Persist and refresh an instance in the current session."""
    session.add(instance)
    session.commit()
    session.refresh(instance)
    return instance


# Users

def ensure_user(session: Session, identity: dict) -> User:
    """Return the user with identity["id"], creating it on first sight."""
    user = session.get(User, identity["id"])
    if user is not None:
        return user
    return save_and_refresh(session, User(**identity))


# Sessions

def insert_session(session: Session, sid: str, user_id: str, expire: datetime) -> AuthSession:
    return save_and_refresh(session, AuthSession(sid=sid, user_id=user_id, expire=expire))


def find_session_user(session: Session, sid: str, now: Optional[datetime] = None) -> Optional[User]:
    """Join sessions -> users for an unexpired sid.

    Unknown and expired sids both give None.
    """
    if now is None:
        now = utcnow()
    stmt = (
        select(User)
        .join(AuthSession, AuthSession.user_id == User.id)
        .where(AuthSession.sid == sid, AuthSession.expire > now)
    )
    return session.exec(stmt).first()


def delete_session(session: Session, sid: str) -> None:
    """Delete a session row. Deleting a missing row is a no-op."""
    row = session.get(AuthSession, sid)
    if row is not None:
        session.delete(row)
        session.commit()


# Financial profiles

def get_financial_profile(session: Session, user_id: str) -> Optional[FinancialProfile]:
    stmt = select(FinancialProfile).where(FinancialProfile.user_id == user_id)
    return session.exec(stmt).first()


def upsert_financial_profile(session: Session, user_id: str, data: dict) -> FinancialProfile:
    """Create the user's profile or overwrite the provided fields."""
    profile = get_financial_profile(session, user_id)
    if profile is None:
        profile = FinancialProfile(user_id=user_id, **data)
    else:
        for field, value in data.items():
            setattr(profile, field, value)
        profile.updated_at = utcnow()
    return save_and_refresh(session, profile)


# Transactions

def list_transactions(session: Session, user_id: str) -> list[Transaction]:
    """List a user's transactions ordered by date descending."""
    stmt = (
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    return list(session.exec(stmt).all())


def create_transaction(session: Session, user_id: str, data: dict) -> Transaction:
    if data.get("date") is None:
        data = {**data, "date": utcnow()}
    return save_and_refresh(session, Transaction(user_id=user_id, **data))
