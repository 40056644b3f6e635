"""
FriendRequest 모델 - 친구 요청 및 친구 관계
ACCEPTED 상태의 요청이 존재하면 두 사용자는 친구
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


FRIEND_REQUEST_STATUSES = ("PENDING", "ACCEPTED", "DECLINED", "CANCELLED")


class FriendRequest(Base):
    __tablename__ = "friend_requests"
    __table_args__ = (
        # 같은 방향의 중복 요청 방지
        UniqueConstraint("requester_id", "recipient_id", name="uq_friend_request_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, nullable=False, default="PENDING", index=True)
    message = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    requester = relationship("User", foreign_keys=[requester_id])
    recipient = relationship("User", foreign_keys=[recipient_id])

    def other_user_id(self, user_id: int) -> int:
        return self.recipient_id if self.requester_id == user_id else self.requester_id

    def __repr__(self):
        return f"<FriendRequest(id={self.id}, {self.requester_id}->{self.recipient_id}, status={self.status})>"
