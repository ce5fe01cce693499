import json
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import SNRProvisioningRun
from .schemas import ProvisionResult

logger = logging.getLogger(__name__)


class ProvisioningRunLogger:
    """Keeps a history of provisioning outcomes so batches can be audited"""

    def __init__(self, db: Session):
        self.db = db

    def log_run(self, result: ProvisionResult) -> SNRProvisioningRun:
        try:
            run = SNRProvisioningRun(
                user_id=result.user_id,
                profile_name=result.profile_name,
                destination_name=result.destination_name,
                mobile_number=result.mobile_number,
                state=result.state.value,
                verified=result.verified,
                steps=json.dumps([step.model_dump() for step in result.steps]),
            )
            self.db.add(run)
            self.db.commit()
            self.db.refresh(run)
            return run

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error logging provisioning run for {result.user_id}: {str(e)}")
            raise

    def list_runs(self, user_id: Optional[str] = None, limit: int = 50) -> List[SNRProvisioningRun]:
        query = self.db.query(SNRProvisioningRun)
        if user_id:
            query = query.filter(SNRProvisioningRun.user_id == user_id)
        return query.order_by(SNRProvisioningRun.id.desc()).limit(limit).all()
