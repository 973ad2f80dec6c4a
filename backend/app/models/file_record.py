"""FileRecord model - file metadata (actual bytes live under the storage root)."""
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin

NAME_MAX_LENGTH = 50
FILE_TYPE_MAX_LENGTH = 20
FILE_PATH_MAX_LENGTH = 500


class FileRecord(Base, TimestampMixin):
    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False, index=True)
    file_type: Mapped[str] = mapped_column(String(FILE_TYPE_MAX_LENGTH), nullable=False, default=".file")
    file_path: Mapped[str] = mapped_column(String(FILE_PATH_MAX_LENGTH), nullable=False, unique=True)
