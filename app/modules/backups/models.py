# Backups do not own a table.
# A backup is a JSON document built from the tables listed in service.BACKUP_TABLES:
#
# {
#   "metadata": {
#     "version": "2.0",
#     "timestamp": "<iso8601>",
#     "created_by": "<user id>",
#     "tables": [...],
#     "record_counts": {"<table>": <int>, ...},
#     "checksum": "<sha256 hex of the compact, key-sorted JSON of data>"
#   },
#   "data": {"<table>": [<row>, ...], ...}
# }
#
# Backup schedules are stored per user in user_settings.preferences.backup_schedule:
#   {"enabled": bool, "frequency": "daily|weekly|monthly", "last_backup": iso, "next_backup": iso}
# Scheduled backups are written to the backup bucket (S3 or Supabase Storage).
