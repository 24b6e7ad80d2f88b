"""
Storage port for the catalog plus in-memory and SQLAlchemy implementations.
"""

from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    Integer,
    Numeric,
    String,
    Text,
    case,
    create_engine,
    func,
    or_,
    select,
    text,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


class ProductCondition(str, Enum):
    NEW = "Novo"
    USED = "Usado"
    SERVICE = "Serviço"


class UserRole(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"


PRODUCT_UPDATE_FIELDS = frozenset(
    {
        "title",
        "description",
        "image_url",
        "price",
        "old_price",
        "discount",
        "link",
        "condition",
        "available_quantity",
        "sold_quantity",
        "free_shipping",
        "category",
        "is_active",
    }
)

USER_UPDATE_FIELDS = frozenset(
    {
        "email",
        "full_name",
        "role",
        "is_active",
        "password_hash",
        "failed_attempts",
        "locked_until",
        "last_login",
    }
)


class DuplicateRecordError(ValueError):
    """Raised when a unique key (product id, username, email) already exists."""


def to_iso(timestamp: Optional[float]) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _check_fields(changes: Mapping[str, object], allowed: frozenset, kind: str) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValueError(f"Unsupported {kind} fields: {', '.join(unknown)}")


@dataclass
class ProductRecord:
    id: str
    title: str
    price: Decimal
    link: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    old_price: Optional[Decimal] = None
    discount: Optional[str] = None
    condition: str = ProductCondition.NEW.value
    available_quantity: int = 10
    sold_quantity: int = 0
    free_shipping: bool = False
    category: str = "TECNOLOGIA"
    is_active: bool = True
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image": self.image_url,
            "price": float(self.price),
            "oldPrice": float(self.old_price) if self.old_price is not None else None,
            "discount": self.discount,
            "link": self.link,
            "condition": self.condition,
            "available_quantity": self.available_quantity,
            "sold_quantity": self.sold_quantity,
            "free_shipping": self.free_shipping,
            "category": self.category,
            "active": self.is_active,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }


@dataclass
class AdminUserRecord:
    id: int
    username: str
    email: str
    password_hash: str
    full_name: str
    role: str = UserRole.EDITOR.value
    is_active: bool = True
    failed_attempts: int = 0
    locked_until: Optional[float] = None
    last_login: Optional[float] = None
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        """Public profile. Never includes the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "is_active": self.is_active,
            "last_login": to_iso(self.last_login),
            "created_at": to_iso(self.created_at),
        }


@dataclass
class AccessLogRecord:
    action: str
    success: bool
    user_id: Optional[int] = None
    username: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[str] = None
    id: Optional[int] = None
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.username,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "action": self.action,
            "success": self.success,
            "details": self.details,
            "created_at": to_iso(self.created_at),
        }


@dataclass
class NewUser:
    username: str
    email: str
    password_hash: str
    full_name: str
    role: str = UserRole.EDITOR.value


AuditFactory = Callable[[AdminUserRecord], AccessLogRecord]


class StoreClient(Protocol):
    """Interface for catalog persistence."""

    # Products
    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        ...

    def list_active_products(self) -> List[ProductRecord]:
        ...

    def list_products(self) -> List[ProductRecord]:
        ...

    def insert_product(self, product: ProductRecord) -> ProductRecord:
        ...

    def update_product(
        self, product_id: str, changes: Mapping[str, object]
    ) -> Optional[ProductRecord]:
        ...

    def delete_product(self, product_id: str) -> bool:
        ...

    def toggle_product(self, product_id: str) -> Optional[ProductRecord]:
        ...

    def product_stats(self) -> dict:
        ...

    # Admin users
    def get_user(self, user_id: int) -> Optional[AdminUserRecord]:
        ...

    def find_user_by_login(self, login: str) -> Optional[AdminUserRecord]:
        ...

    def create_user(
        self, user: NewUser, *, audit: Optional[AccessLogRecord] = None
    ) -> AdminUserRecord:
        ...

    def update_user(
        self,
        user_id: int,
        changes: Mapping[str, object],
        *,
        audit: Optional[AccessLogRecord] = None,
    ) -> Optional[AdminUserRecord]:
        ...

    def record_login_failure(
        self,
        user_id: int,
        *,
        max_attempts: int,
        lockout_seconds: float,
        now: float,
        audit: Optional[AuditFactory] = None,
    ) -> Optional[AdminUserRecord]:
        """
        Atomically count one failed login. A lapsed lock restarts the counter;
        reaching ``max_attempts`` sets ``locked_until = now + lockout_seconds``.
        Returns None, without counting, when the account is missing or still
        locked.
        """
        ...

    def list_users(self) -> List[AdminUserRecord]:
        ...

    def count_users(self) -> int:
        ...

    # Access logs
    def log_access(self, entry: AccessLogRecord) -> None:
        ...

    def list_access_logs(self, limit: int = 100) -> List[AccessLogRecord]:
        ...

    # Store settings
    def get_setting(self, key: str) -> Optional[str]:
        ...

    def list_settings(self) -> Dict[str, str]:
        ...

    def set_settings(
        self, values: Mapping[str, str], descriptions: Optional[Mapping[str, str]] = None
    ) -> None:
        ...

    def seed(
        self,
        admin: NewUser,
        settings: Iterable[tuple[str, str, str]],
        products: Iterable[ProductRecord],
    ) -> bool:
        ...

    def ping(self) -> bool:
        ...


def _stats(products: Iterable[ProductRecord]) -> dict:
    total = active = sold = 0
    revenue = Decimal("0")
    for product in products:
        total += 1
        active += 1 if product.is_active else 0
        sold += product.sold_quantity or 0
        revenue += Decimal(product.price) * (product.sold_quantity or 0)
    return {
        "total": total,
        "active": active,
        "inactive": total - active,
        "total_sold": sold,
        "total_revenue": revenue,
    }


class InMemoryStoreClient:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.products: Dict[str, ProductRecord] = {}
        self.users: Dict[int, AdminUserRecord] = {}
        self.access_logs: List[AccessLogRecord] = []
        self.settings: Dict[str, tuple[str, Optional[str]]] = {}
        self._lock = threading.Lock()
        self._user_ids = itertools.count(1)
        self._log_ids = itertools.count(1)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.products.clear()
        self.users.clear()
        self.access_logs.clear()
        self.settings.clear()
        self._user_ids = itertools.count(1)
        self._log_ids = itertools.count(1)

    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        product = self.products.get(product_id)
        return replace(product) if product else None

    def list_active_products(self) -> List[ProductRecord]:
        return [p for p in self.list_products() if p.is_active]

    def list_products(self) -> List[ProductRecord]:
        ordered = sorted(
            self.products.values(), key=lambda p: p.created_at, reverse=True
        )
        return [replace(p) for p in ordered]

    def insert_product(self, product: ProductRecord) -> ProductRecord:
        if product.id in self.products:
            raise DuplicateRecordError(f"Product {product.id} already exists")
        self.products[product.id] = replace(product)
        return replace(product)

    def update_product(
        self, product_id: str, changes: Mapping[str, object]
    ) -> Optional[ProductRecord]:
        _check_fields(changes, PRODUCT_UPDATE_FIELDS, "product")
        product = self.products.get(product_id)
        if not product:
            return None
        for key, value in changes.items():
            setattr(product, key, value)
        product.updated_at = time.time()
        return replace(product)

    def delete_product(self, product_id: str) -> bool:
        return self.products.pop(product_id, None) is not None

    def toggle_product(self, product_id: str) -> Optional[ProductRecord]:
        product = self.products.get(product_id)
        if not product:
            return None
        product.is_active = not product.is_active
        product.updated_at = time.time()
        return replace(product)

    def product_stats(self) -> dict:
        return _stats(self.products.values())

    def get_user(self, user_id: int) -> Optional[AdminUserRecord]:
        user = self.users.get(user_id)
        return replace(user) if user else None

    def find_user_by_login(self, login: str) -> Optional[AdminUserRecord]:
        for user in self.users.values():
            if user.username == login or user.email == login:
                return replace(user)
        return None

    def create_user(
        self, user: NewUser, *, audit: Optional[AccessLogRecord] = None
    ) -> AdminUserRecord:
        for existing in self.users.values():
            if existing.username == user.username or existing.email == user.email:
                raise DuplicateRecordError("Username or email already registered")
        record = AdminUserRecord(
            id=next(self._user_ids),
            username=user.username,
            email=user.email,
            password_hash=user.password_hash,
            full_name=user.full_name,
            role=user.role,
        )
        self.users[record.id] = record
        if audit:
            self.log_access(audit)
        return replace(record)

    def update_user(
        self,
        user_id: int,
        changes: Mapping[str, object],
        *,
        audit: Optional[AccessLogRecord] = None,
    ) -> Optional[AdminUserRecord]:
        _check_fields(changes, USER_UPDATE_FIELDS, "user")
        with self._lock:
            user = self.users.get(user_id)
            if not user:
                return None
            email = changes.get("email")
            if email and any(
                other.email == email
                for other in self.users.values()
                if other.id != user_id
            ):
                raise DuplicateRecordError("Email already registered")
            for key, value in changes.items():
                setattr(user, key, value)
            user.updated_at = time.time()
            if audit:
                self.log_access(audit)
            return replace(user)

    def record_login_failure(
        self,
        user_id: int,
        *,
        max_attempts: int,
        lockout_seconds: float,
        now: float,
        audit: Optional[AuditFactory] = None,
    ) -> Optional[AdminUserRecord]:
        with self._lock:
            user = self.users.get(user_id)
            if not user or (user.locked_until and user.locked_until > now):
                return None
            user.failed_attempts = 1 if user.locked_until else user.failed_attempts + 1
            user.locked_until = (
                now + lockout_seconds if user.failed_attempts >= max_attempts else None
            )
            user.updated_at = now
            if audit:
                self.log_access(audit(replace(user)))
            return replace(user)

    def list_users(self) -> List[AdminUserRecord]:
        ordered = sorted(self.users.values(), key=lambda u: u.created_at, reverse=True)
        return [replace(u) for u in ordered]

    def count_users(self) -> int:
        return len(self.users)

    def log_access(self, entry: AccessLogRecord) -> None:
        self.access_logs.append(replace(entry, id=next(self._log_ids)))

    def list_access_logs(self, limit: int = 100) -> List[AccessLogRecord]:
        return [replace(e) for e in reversed(self.access_logs)][:limit]

    def get_setting(self, key: str) -> Optional[str]:
        entry = self.settings.get(key)
        return entry[0] if entry else None

    def list_settings(self) -> Dict[str, str]:
        return {key: value for key, (value, _) in sorted(self.settings.items())}

    def set_settings(
        self, values: Mapping[str, str], descriptions: Optional[Mapping[str, str]] = None
    ) -> None:
        descriptions = descriptions or {}
        for key, value in values.items():
            previous = self.settings.get(key, (None, None))[1]
            self.settings[key] = (value, descriptions.get(key, previous))

    def seed(
        self,
        admin: NewUser,
        settings: Iterable[tuple[str, str, str]],
        products: Iterable[ProductRecord],
    ) -> bool:
        if self.find_user_by_login(admin.username):
            return False
        self.create_user(admin)
        settings = list(settings)
        self.set_settings(
            {key: value for key, value, _ in settings},
            {key: description for key, _, description in settings},
        )
        for product in products:
            if product.id not in self.products:
                self.insert_product(product)
        return True

    def ping(self) -> bool:
        return True


class SqlStoreClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (Postgres,
    a SQLite file, or SQLite in memory for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlStoreClient")
        engine_kwargs = {"future": True, "pool_pre_ping": True}
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # One shared connection, otherwise every checkout sees an empty database.
            engine_kwargs.update(
                poolclass=StaticPool, connect_args={"check_same_thread": False}
            )
        elif not database_url.startswith("sqlite"):
            engine_kwargs["pool_recycle"] = 1800
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_product(row: "ProductRow") -> ProductRecord:
        return ProductRecord(
            id=row.id,
            title=row.title,
            description=row.description,
            image_url=row.image_url,
            price=Decimal(row.price),
            old_price=Decimal(row.old_price) if row.old_price is not None else None,
            discount=row.discount,
            link=row.link,
            condition=row.condition,
            available_quantity=row.available_quantity,
            sold_quantity=row.sold_quantity,
            free_shipping=bool(row.free_shipping),
            category=row.category,
            is_active=bool(row.is_active),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _to_user(row: "AdminUserRow") -> AdminUserRecord:
        return AdminUserRecord(
            id=row.id,
            username=row.username,
            email=row.email,
            password_hash=row.password_hash,
            full_name=row.full_name,
            role=row.role,
            is_active=bool(row.is_active),
            failed_attempts=row.failed_attempts or 0,
            locked_until=row.locked_until,
            last_login=row.last_login,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _to_log(row: "AccessLogRow") -> AccessLogRecord:
        return AccessLogRecord(
            id=row.id,
            user_id=row.user_id,
            username=row.username,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
            action=row.action,
            success=bool(row.success),
            details=row.details,
            created_at=row.created_at,
        )

    @staticmethod
    def _log_row(entry: AccessLogRecord) -> "AccessLogRow":
        return AccessLogRow(
            user_id=entry.user_id,
            username=entry.username,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            action=entry.action,
            success=entry.success,
            details=entry.details,
            created_at=entry.created_at,
        )

    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            return self._to_product(row) if row else None

    def list_active_products(self) -> List[ProductRecord]:
        with self.Session() as session:
            stmt = (
                select(ProductRow)
                .where(ProductRow.is_active.is_(True))
                .order_by(ProductRow.created_at.desc())
            )
            return [self._to_product(row) for row in session.execute(stmt).scalars()]

    def list_products(self) -> List[ProductRecord]:
        with self.Session() as session:
            stmt = select(ProductRow).order_by(ProductRow.created_at.desc())
            return [self._to_product(row) for row in session.execute(stmt).scalars()]

    def insert_product(self, product: ProductRecord) -> ProductRecord:
        with self.Session() as session:
            if session.get(ProductRow, product.id):
                raise DuplicateRecordError(f"Product {product.id} already exists")
            row = ProductRow(
                id=product.id,
                title=product.title,
                description=product.description,
                image_url=product.image_url,
                price=product.price,
                old_price=product.old_price,
                discount=product.discount,
                link=product.link,
                condition=product.condition,
                available_quantity=product.available_quantity,
                sold_quantity=product.sold_quantity,
                free_shipping=product.free_shipping,
                category=product.category,
                is_active=product.is_active,
                created_at=product.created_at,
                updated_at=product.updated_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_product(row)

    def update_product(
        self, product_id: str, changes: Mapping[str, object]
    ) -> Optional[ProductRecord]:
        _check_fields(changes, PRODUCT_UPDATE_FIELDS, "product")
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            if not row:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_product(row)

    def delete_product(self, product_id: str) -> bool:
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def toggle_product(self, product_id: str) -> Optional[ProductRecord]:
        with self.Session() as session:
            row = session.get(ProductRow, product_id)
            if not row:
                return None
            row.is_active = not row.is_active
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_product(row)

    def product_stats(self) -> dict:
        with self.Session() as session:
            total, active, sold, revenue = session.execute(
                select(
                    func.count(ProductRow.id),
                    func.coalesce(
                        func.sum(case((ProductRow.is_active.is_(True), 1), else_=0)),
                        0,
                    ),
                    func.coalesce(func.sum(ProductRow.sold_quantity), 0),
                    func.coalesce(
                        func.sum(ProductRow.price * ProductRow.sold_quantity), 0
                    ),
                )
            ).one()
        return {
            "total": int(total),
            "active": int(active),
            "inactive": int(total) - int(active),
            "total_sold": int(sold),
            "total_revenue": Decimal(str(revenue)),
        }

    def get_user(self, user_id: int) -> Optional[AdminUserRecord]:
        with self.Session() as session:
            row = session.get(AdminUserRow, user_id)
            return self._to_user(row) if row else None

    def find_user_by_login(self, login: str) -> Optional[AdminUserRecord]:
        with self.Session() as session:
            stmt = select(AdminUserRow).where(
                or_(AdminUserRow.username == login, AdminUserRow.email == login)
            )
            row = session.execute(stmt).scalars().first()
            return self._to_user(row) if row else None

    def create_user(
        self, user: NewUser, *, audit: Optional[AccessLogRecord] = None
    ) -> AdminUserRecord:
        now = time.time()
        row = AdminUserRow(
            username=user.username,
            email=user.email,
            password_hash=user.password_hash,
            full_name=user.full_name,
            role=user.role,
            is_active=True,
            failed_attempts=0,
            created_at=now,
            updated_at=now,
        )
        try:
            with self.Session.begin() as session:
                session.add(row)
                if audit:
                    session.add(self._log_row(audit))
        except IntegrityError as exc:
            raise DuplicateRecordError("Username or email already registered") from exc
        return self._to_user(row)

    def update_user(
        self,
        user_id: int,
        changes: Mapping[str, object],
        *,
        audit: Optional[AccessLogRecord] = None,
    ) -> Optional[AdminUserRecord]:
        _check_fields(changes, USER_UPDATE_FIELDS, "user")
        try:
            with self.Session.begin() as session:
                row = session.get(AdminUserRow, user_id)
                if not row:
                    return None
                for key, value in changes.items():
                    setattr(row, key, value)
                row.updated_at = time.time()
                if audit:
                    session.add(self._log_row(audit))
        except IntegrityError as exc:
            raise DuplicateRecordError("Email already registered") from exc
        return self._to_user(row)

    def record_login_failure(
        self,
        user_id: int,
        *,
        max_attempts: int,
        lockout_seconds: float,
        now: float,
        audit: Optional[AuditFactory] = None,
    ) -> Optional[AdminUserRecord]:
        # One UPDATE computes the new count from the stored one, so concurrent
        # failures cannot overwrite each other.
        attempts = case(
            (AdminUserRow.locked_until.is_(None), AdminUserRow.failed_attempts + 1),
            else_=1,
        )
        stmt = (
            update(AdminUserRow)
            .where(
                AdminUserRow.id == user_id,
                or_(
                    AdminUserRow.locked_until.is_(None),
                    AdminUserRow.locked_until <= now,
                ),
            )
            .values(
                failed_attempts=attempts,
                locked_until=case(
                    (attempts >= max_attempts, now + lockout_seconds), else_=None
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        with self.Session.begin() as session:
            if session.execute(stmt).rowcount != 1:
                return None
            user = self._to_user(session.get(AdminUserRow, user_id))
            if audit:
                session.add(self._log_row(audit(user)))
        return user

    def list_users(self) -> List[AdminUserRecord]:
        with self.Session() as session:
            stmt = select(AdminUserRow).order_by(AdminUserRow.created_at.desc())
            return [self._to_user(row) for row in session.execute(stmt).scalars()]

    def count_users(self) -> int:
        with self.Session() as session:
            return session.execute(select(func.count(AdminUserRow.id))).scalar_one()

    def log_access(self, entry: AccessLogRecord) -> None:
        with self.Session() as session:
            session.add(self._log_row(entry))
            session.commit()

    def list_access_logs(self, limit: int = 100) -> List[AccessLogRecord]:
        with self.Session() as session:
            stmt = (
                select(AccessLogRow)
                .order_by(AccessLogRow.created_at.desc(), AccessLogRow.id.desc())
                .limit(limit)
            )
            return [self._to_log(row) for row in session.execute(stmt).scalars()]

    def get_setting(self, key: str) -> Optional[str]:
        with self.Session() as session:
            row = session.get(SettingRow, key)
            return row.value if row else None

    def list_settings(self) -> Dict[str, str]:
        with self.Session() as session:
            rows = session.execute(select(SettingRow).order_by(SettingRow.key)).scalars()
            return {row.key: row.value for row in rows}

    def set_settings(
        self, values: Mapping[str, str], descriptions: Optional[Mapping[str, str]] = None
    ) -> None:
        descriptions = descriptions or {}
        with self.Session.begin() as session:
            self._upsert_settings(session, values, descriptions)

    @staticmethod
    def _upsert_settings(
        session: Session, values: Mapping[str, str], descriptions: Mapping[str, str]
    ) -> None:
        now = time.time()
        for key, value in values.items():
            row = session.get(SettingRow, key)
            if row:
                row.value = value
                if key in descriptions:
                    row.description = descriptions[key]
                row.updated_at = now
            else:
                session.add(
                    SettingRow(
                        key=key,
                        value=value,
                        description=descriptions.get(key),
                        updated_at=now,
                    )
                )

    def seed(
        self,
        admin: NewUser,
        settings: Iterable[tuple[str, str, str]],
        products: Iterable[ProductRecord],
    ) -> bool:
        now = time.time()
        settings = list(settings)
        with self.Session.begin() as session:
            exists = session.execute(
                select(AdminUserRow.id).where(AdminUserRow.username == admin.username)
            ).first()
            if exists:
                return False
            session.add(
                AdminUserRow(
                    username=admin.username,
                    email=admin.email,
                    password_hash=admin.password_hash,
                    full_name=admin.full_name,
                    role=admin.role,
                    is_active=True,
                    failed_attempts=0,
                    created_at=now,
                    updated_at=now,
                )
            )
            self._upsert_settings(
                session,
                {key: value for key, value, _ in settings},
                {key: description for key, _, description in settings},
            )
            for product in products:
                if session.get(ProductRow, product.id):
                    continue
                session.add(
                    ProductRow(
                        id=product.id,
                        title=product.title,
                        description=product.description,
                        image_url=product.image_url,
                        price=product.price,
                        old_price=product.old_price,
                        discount=product.discount,
                        link=product.link,
                        condition=product.condition,
                        available_quantity=product.available_quantity,
                        sold_quantity=product.sold_quantity,
                        free_shipping=product.free_shipping,
                        category=product.category,
                        is_active=product.is_active,
                        created_at=product.created_at,
                        updated_at=product.updated_at,
                    )
                )
        return True

    def ping(self) -> bool:
        with self.Session() as session:
            session.execute(text("SELECT 1"))
        return True


Base = declarative_base()


class ProductRow(Base):
    __tablename__ = "products"

    id = Column(String(50), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    old_price = Column(Numeric(10, 2), nullable=True)
    discount = Column(String(20), nullable=True)
    link = Column(Text, nullable=False)
    condition = Column(String(20), nullable=False, default=ProductCondition.NEW.value)
    available_quantity = Column(Integer, nullable=False, default=0)
    sold_quantity = Column(Integer, nullable=False, default=0)
    free_shipping = Column(Boolean, nullable=False, default=False)
    category = Column(String(50), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class AdminUserRow(Base):
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.EDITOR.value)
    is_active = Column(Boolean, nullable=False, default=True)
    failed_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(Float, nullable=True)
    last_login = Column(Float, nullable=True)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)


class AccessLogRow(Base):
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True, index=True)
    username = Column(String(100), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    action = Column(String(50), nullable=False)
    success = Column(Boolean, nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(Float, nullable=False, index=True)


class SettingRow(Base):
    __tablename__ = "settings"

    key = Column(String(50), primary_key=True)
    value = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    updated_at = Column(Float, nullable=False)
