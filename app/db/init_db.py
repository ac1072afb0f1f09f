from app.db.base import Base
from app.db.session import get_engine

# models must be imported so their tables are registered on Base.metadata
from app.db.models import user, post, comment  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=get_engine())
