from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, func
from feedback360.database import Base
from feedback360.models.profile import new_id


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False, default="system")  # pin, assessment, triwulan, system
    priority = Column(String, nullable=False, default="normal")  # low, normal, high
    is_read = Column(Boolean, nullable=False, default=False)
    action_url = Column(String, nullable=True)
    action_label = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
