from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Index
from shared.database import Base
from datetime import datetime


class SNRProvisioningRun(Base):
    __tablename__ = "snr_provisioning_runs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(128), nullable=False)
    profile_name = Column(String(128))
    destination_name = Column(String(128))
    mobile_number = Column(String(32))
    state = Column(String(32), nullable=False, default="INIT")  # ProvisionState value
    verified = Column(Boolean, nullable=False, default=False)
    steps = Column(Text)  # JSON list of StepResult
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("idx_snr_runs_user_id", "user_id"),)

    def __repr__(self):
        return f"<SNRProvisioningRun(id={self.id}, user_id={self.user_id}, state={self.state}, verified={self.verified})>"
