from typing import FrozenSet, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models import TrustedDomain
from app.services.service_errors import ServiceError


def list_domains(db: Session) -> List[TrustedDomain]:
    return list(db.scalars(select(TrustedDomain).order_by(TrustedDomain.created_at.desc(), TrustedDomain.id.desc())))


def domain_names(db: Session) -> FrozenSet[str]:
    return frozenset(db.scalars(select(TrustedDomain.domain)))


def add_domain(db: Session, domain: str) -> TrustedDomain:
    normalised = domain.strip().lower()
    existing = db.scalar(select(TrustedDomain).where(TrustedDomain.domain == normalised))
    if existing is not None:
        raise ServiceError(f"Domain {normalised} is already trusted", status_code=409, code="domain_exists")

    row = TrustedDomain(domain=normalised)
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ServiceError(f"Domain {normalised} is already trusted", status_code=409, code="domain_exists") from exc
    db.refresh(row)
    return row


def delete_domain(db: Session, domain_id: int) -> None:
    row = db.get(TrustedDomain, domain_id)
    if row is None:
        raise ServiceError("Trusted domain not found", status_code=404, code="domain_not_found")
    db.delete(row)
    db.commit()
