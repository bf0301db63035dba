"""SQLAlchemy models for bankledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from bankledger.domain.entities import AccountType, AuditAction, TransactionType

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Customer(Base):
    """Bank customer model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="customer")


class Account(Base):
    """Bank account model. ``balance_cents`` is maintained by the ledger only."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    account_type = Column(Enum(AccountType, name="account_type"), nullable=False)
    balance_cents = Column(BigInteger, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_accounts_customer_id", "customer_id"),
        Index("ix_accounts_account_type", "account_type"),
    )

    # Relationships
    customer = relationship("Customer", back_populates="accounts")
    transactions = relationship(
        "Transaction", back_populates="account", foreign_keys="Transaction.account_id"
    )


class Transaction(Base):
    """Transaction model. TRANSFER rows also reference a destination account."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    transaction_type = Column(Enum(TransactionType, name="transaction_type"), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(String, nullable=True)
    destination_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_amount_positive"),
        Index("ix_transactions_account_id", "account_id"),
        Index("ix_transactions_destination_account_id", "destination_account_id"),
        Index("ix_transactions_created_at", "created_at"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions", foreign_keys=[account_id])
    destination_account = relationship("Account", foreign_keys=[destination_account_id])


class AuditLog(Base):
    """Append-only audit trail model."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    actor_id = Column(String, nullable=False)
    action = Column(Enum(AuditAction, name="audit_action"), nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=True)
    details = Column(Text, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_audit_logs_actor_id", "actor_id"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_audit_logs_created_at", "created_at"),
    )


def _use_immediate_sqlite_transactions(engine: Engine) -> None:
    """Start every SQLite transaction with ``BEGIN IMMEDIATE``.

    pysqlite only opens a transaction at the first INSERT/UPDATE/DELETE, so
    reads in a unit of work would run without any lock. Taking the database
    write lock at BEGIN serializes read-modify-write sessions across
    processes sharing one file. Waiting writers use the driver's busy timeout.
    """

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # Disable pysqlite's own BEGIN handling
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        _use_immediate_sqlite_transactions(engine)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
