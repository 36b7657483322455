# storefront/repos/__init__.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from storefront.data.database import Base, make_engine, make_session_factory
from storefront.repos.address_repo import SqlAddressRepo
from storefront.repos.base import Storage
from storefront.repos.cart_repo import SqlCartRepo
from storefront.repos.catalog_repo import SqlCatalogRepo
from storefront.repos.memory import MemoryDatabase, build_memory_storage
from storefront.repos.order_repo import SqlOrderRepo
from storefront.repos.review_repo import SqlReviewRepo
from storefront.repos.user_repo import SqlUserRepo
from storefront.repos.wishlist_repo import SqlWishlistRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

BACKENDS = ("sql", "memory")


def build_sql_storage(db: Session) -> Storage:
    return Storage(
        users=SqlUserRepo(db),
        catalog=SqlCatalogRepo(db),
        carts=SqlCartRepo(db),
        wishlist=SqlWishlistRepo(db),
        addresses=SqlAddressRepo(db),
        orders=SqlOrderRepo(db),
        reviews=SqlReviewRepo(db),
    )


class SqlStorageProvider:
    name = "sql"

    def __init__(self, database_url: str):
        # models must be imported before create_all
        import storefront.data.models  # noqa: F401

        self.engine = make_engine(database_url)
        self.session_factory = make_session_factory(self.engine)

    def init_schema(self):
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Tables ready: {sorted(Base.metadata.tables.keys())}")

    @contextmanager
    def session(self) -> Iterator[Storage]:
        db = self.session_factory()
        try:
            yield build_sql_storage(db)
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()


class MemoryStorageProvider:
    name = "memory"

    def __init__(self):
        self.mdb = MemoryDatabase()
        self._storage = build_memory_storage(self.mdb)

    def init_schema(self):
        logger.info("Using in-memory storage, data is lost on restart")

    @contextmanager
    def session(self) -> Iterator[Storage]:
        yield self._storage

    def dispose(self):
        pass


def build_storage_provider(backend: str, database_url: str | None = None):
    """Pick the storage backend once, from explicit configuration."""
    if backend == "sql":
        if not database_url:
            raise ValueError("STORAGE_BACKEND=sql needs DATABASE_URL")
        return SqlStorageProvider(database_url)
    if backend == "memory":
        return MemoryStorageProvider()
    raise ValueError(f"Unknown STORAGE_BACKEND '{backend}', expected one of {BACKENDS}")
