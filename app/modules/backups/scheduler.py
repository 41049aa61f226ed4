import asyncio
import logging
from datetime import datetime, timezone
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.backups.service import BackupSystem, backup_to_bytes, next_backup_date
from app.modules.documents.storage import get_storage

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def run_due_backups(supabase=None) -> int:
    """Create and store a backup for every enabled schedule whose next_backup has passed."""
    supabase = supabase or get_supabase()
    backups = BackupSystem(supabase)
    storage = get_storage(supabase, settings.backup_bucket)
    now = datetime.now(timezone.utc)

    result = supabase.table("user_settings").select("user_id, preferences").execute()
    completed = 0
    for row in result.data or []:
        preferences = row.get("preferences") or {}
        schedule = preferences.get("backup_schedule") or {}
        if not schedule.get("enabled") or not schedule.get("next_backup"):
            continue
        user_id = row["user_id"]
        try:
            if _parse_timestamp(schedule["next_backup"]) > now:
                continue
            logger.info(f"Running scheduled {schedule.get('frequency')} backup for user {user_id}")
            backup = backups.create_backup(user_id)
            key = f"{user_id}/backup-{now:%Y%m%dT%H%M%SZ}.json"
            location = storage.upload_file(backup_to_bytes(backup), key, "application/json")

            schedule["last_backup"] = now.isoformat()
            schedule["next_backup"] = next_backup_date(schedule.get("frequency", "daily"), now).isoformat()
            schedule["last_location"] = location
            preferences["backup_schedule"] = schedule
            supabase.table("user_settings")\
                .update({"preferences": preferences, "updated_at": now.isoformat()})\
                .eq("user_id", user_id)\
                .execute()
            completed += 1
        except Exception as e:
            logger.error(f"Scheduled backup for user {user_id} failed: {str(e)}")
    return completed


async def backup_scheduler_loop():
    """Background task that periodically runs due backups"""
    while True:
        try:
            completed = await asyncio.to_thread(run_due_backups)
            if completed:
                logger.info(f"Completed {completed} scheduled backup(s)")
        except Exception as e:
            logger.error(f"Error in backup scheduler loop: {str(e)}")

        await asyncio.sleep(settings.backup_scheduler_interval)
