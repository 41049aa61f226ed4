"""
Seed permissions and module roles from app.config.permissions_config.

Run with:  python -m app.scripts.seed_permissions_roles
Safe to re-run: rows are upserted by name and role_permissions is synced
to the matrix (stale grants removed).
"""

import logging
import sys
from typing import Dict, List

from supabase import Client

from app.config.permissions_config import PERMISSION_MATRIX
from app.database.supabase_client import get_supabase

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_permissions(supabase: Client) -> Dict[str, str]:
    """Upsert every permission and return a name -> id map"""
    permissions = PERMISSION_MATRIX["permissions"]
    logger.info(f"Seeding {len(permissions)} permissions...")

    supabase.table("permissions")\
        .upsert(permissions, on_conflict="name")\
        .execute()

    result = supabase.table("permissions")\
        .select("id, name")\
        .in_("name", [p["name"] for p in permissions])\
        .execute()
    return {row["name"]: row["id"] for row in result.data or []}


def sync_role_permissions(supabase: Client, role_id: str, role_name: str, wanted_ids: List[str]) -> None:
    existing = supabase.table("role_permissions")\
        .select("permission_id")\
        .eq("role_id", role_id)\
        .execute()
    current = {row["permission_id"] for row in existing.data or []}
    wanted = set(wanted_ids)

    missing = wanted - current
    if missing:
        supabase.table("role_permissions")\
            .insert([{"role_id": role_id, "permission_id": pid} for pid in sorted(missing)])\
            .execute()

    stale = current - wanted
    if stale:
        supabase.table("role_permissions")\
            .delete()\
            .eq("role_id", role_id)\
            .in_("permission_id", sorted(stale))\
            .execute()

    if missing or stale:
        logger.debug(f"{role_name}: +{len(missing)} / -{len(stale)} permissions")


def seed_roles(supabase: Client, permission_ids: Dict[str, str]) -> int:
    roles = PERMISSION_MATRIX["roles"]
    logger.info(f"Seeding {len(roles)} roles...")
    processed = 0

    for role in roles:
        try:
            result = supabase.table("roles")\
                .upsert({"name": role["name"], "description": role["description"]}, on_conflict="name")\
                .execute()
            if not result.data:
                logger.warning(f"Role {role['name']} was not returned by upsert, skipping grants")
                continue

            unknown = [name for name in role["permissions"] if name not in permission_ids]
            if unknown:
                logger.warning(f"Role {role['name']} references unseeded permissions: {unknown}")

            sync_role_permissions(
                supabase,
                result.data[0]["id"],
                role["name"],
                [permission_ids[name] for name in role["permissions"] if name in permission_ids],
            )
            processed += 1
        except Exception as e:
            logger.error(f"Error processing role {role['name']}: {e}")

    return processed


def main() -> int:
    try:
        supabase = get_supabase()
        permission_ids = seed_permissions(supabase)
        role_count = seed_roles(supabase, permission_ids)
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        return 1

    logger.info(f"Seeding completed: {len(permission_ids)} permissions, {role_count} roles")
    return 0


if __name__ == "__main__":
    sys.exit(main())
