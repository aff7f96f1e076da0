"""Backup the time tracking database with ``mysqldump``.

Only the tables owned by this service are dumped (employees, time_entries).
"""

from __future__ import annotations

import importlib
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

TABLES = ("employees", "time_entries")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    out_file = out_dir / f"{db['database']}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.sql"

    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        "--single-transaction",
        db["database"],
        *TABLES,
    ]
    if db.get("password"):
        cmd.insert(4, f"-p{db['password']}")

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools first.")
    except subprocess.CalledProcessError as e:
        out_file.unlink(missing_ok=True)
        raise SystemExit(f"mysqldump failed: {e.stderr.decode('utf-8', 'replace').strip()}")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
