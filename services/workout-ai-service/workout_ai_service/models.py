from sqlalchemy import JSON, Column, DateTime, Integer, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class NotificationLog(Base):
    """One successfully sent daily workout email. Append-only."""

    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    email_sent_to = Column(String(320), nullable=False)
    workout_data = Column(JSON, nullable=False)  # the Workout as sent
    sent_at = Column(DateTime, server_default=func.now(), nullable=False)
