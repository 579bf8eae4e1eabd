from db.db_operation import mongo_conn
from datetime import datetime
from utils.logger import get_logger

logger = get_logger("Audit_Service")

async def record(actor_email: str, action: str, resource_type: str, resource_id: str, before: dict | None = None, after: dict | None = None):
    """Append one entry to the audit log for an admin mutation."""
    entry = {
        "actor_email": actor_email,
        "action": action,
        "resource_type": resource_type,
        "resource_id": resource_id,
        "before": before,
        "after": after,
        "timestamp": datetime.utcnow()
    }
    await mongo_conn.audit_logs.insert_one(entry)
    logger.debug(f"Audit: {actor_email} {action} {resource_type}/{resource_id}")

async def list_entries(resource_type: str | None = None, resource_id: str | None = None, limit: int = 100):
    query = {}
    if resource_type:
        query["resource_type"] = resource_type
    if resource_id:
        query["resource_id"] = resource_id
    cursor = mongo_conn.audit_logs.find(query).sort([("timestamp", -1), ("_id", -1)]).limit(limit)
    docs = await cursor.to_list(length=limit)
    out = []
    for d in docs:
        d["id"] = str(d.pop("_id"))
        out.append(d)
    return out
