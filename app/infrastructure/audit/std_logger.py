import json
import logging
from datetime import datetime
from typing import Optional, Dict, Any

from ...application.ports.audit_logger import AuditLogger


class StdAuditLogger(AuditLogger):
    def __init__(self, name: str = "app.audit") -> None:
        self._logger = logging.getLogger(name)

    def log(self, action: str, actor_id: Optional[str], success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "action": action,
            "actor_id": actor_id,
            "success": success,
            "details": details or {},
        }
        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, f"AUDIT: {json.dumps(entry, default=str)}")
