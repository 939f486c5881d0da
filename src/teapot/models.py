"""SQLAlchemy models.

Every table model inherits from Base so Alembic autogenerate can see it.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from teapot.db.session import Base


class TeaRecord(Base):
    __tablename__ = "teas"

    # 24 lowercase hex characters, assigned by the repository on create
    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    name: Mapped[str]
    category: Mapped[str]
