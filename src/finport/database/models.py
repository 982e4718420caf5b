"""SQLAlchemy models for finport database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_account_owner_name"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")


class Category(Base):
    """Transaction category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_category_owner_name"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class ImportLog(Base):
    """Audit record for one import batch."""

    __tablename__ = "import_logs"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    bank_source = Column(String, nullable=True)
    total_rows = Column(Integer, nullable=False)
    imported_rows = Column(Integer, default=0, nullable=False)
    skipped_rows = Column(Integer, default=0, nullable=False)
    status = Column(String(16), default="PROCESSING", nullable=False)
    error_message = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    finished_at = Column(DateTime, nullable=True)

    __table_args__ = (Index("ix_import_logs_owner_created", "owner_id", "created_at"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="import_log")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    import_log_id = Column(Integer, ForeignKey("import_logs.id"), nullable=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    kind = Column(String(16), nullable=False)
    description = Column(String, nullable=False)
    fingerprint = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # A fingerprint identifies one transaction per owner
    __table_args__ = (
        UniqueConstraint("owner_id", "fingerprint", name="uq_owner_fingerprint"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    import_log = relationship("ImportLog", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
