import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Enum, ForeignKey, Index, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blocklog.models.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlockStatus(str, enum.Enum):
    ONGOING = "ongoing"
    RESOLVED = "resolved"


block_tags = Table(
    "block_tags",
    Base.metadata,
    Column("block_id", Uuid, ForeignKey("blocks.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Block(Base):
    __tablename__ = "blocks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[BlockStatus] = mapped_column(
        Enum(BlockStatus, name="block_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BlockStatus.ONGOING,
    )

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # milliseconds; only meaningful once resolved
    duration: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    tags: Mapped[list["Tag"]] = relationship("Tag", secondary=block_tags, back_populates="blocks")


# per-user listing and calendar windows
Index("ix_blocks_user_created", Block.user_id, Block.created_at)
Index("ix_blocks_user_started", Block.user_id, Block.started_at)
