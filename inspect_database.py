#!/usr/bin/env python3
"""
Backend store check for TastyTray.

Connects to the configured store (SQLite file or Supabase PostgreSQL via
DATABASE_URL), creates any missing tables, and reports which expected tables
are reachable along with their row counts. Run it before starting the app.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))
load_dotenv()

from config.database_config import get_backend_store, get_database_info
from services import StoreError
from utils import get_config, setup_logging


def mask_url(url: str) -> str:
    """Hide the password part of a connection URL"""
    if '@' not in url or '://' not in url:
        return url
    scheme, rest = url.split('://', 1)
    credentials, host = rest.rsplit('@', 1)
    user = credentials.split(':', 1)[0]
    return f"{scheme}://{user}:[PASSWORD]@{host}"


def inspect_database(config=None) -> bool:
    """Check the configured backend store; returns True when every table is reachable"""
    config = config or get_config()
    info = get_database_info(config)

    print(f"[INSPECT] Backend: {info['description']}")
    print(f"   Location: {info['location']}")
    if info['type'] == 'supabase':
        print(f"   URL: {mask_url(config.database_url)}")

    try:
        print("[CONNECT] Attempting connection...")
        store = get_backend_store(config)
    except StoreError as e:
        print(f"[ERROR] Connection failed: {e}")
        print("\n[TIPS] Troubleshooting tips:")
        print("   1. Check DATABASE_URL / TASTY_DB_PATH in your .env file")
        print("   2. Verify the Supabase project is running")
        print("   3. Check internet connection")
        return False

    print("[SUCCESS] Connected")

    results = store.check_tables()
    print("\n[TABLES] Expected tables:")
    for table, ok in results.items():
        print(f"   {'[OK]' if ok else '[MISSING]'} {table}")

    if all(results.values()):
        print("\n[STATS] Row counts:")
        for table, count in store.get_database_stats().items():
            print(f"   {table}: {count}")

    missing = [t for t, ok in results.items() if not ok]
    if missing:
        print(f"\n[ERROR] Unreachable tables: {', '.join(missing)}")
        return False
    return True


if __name__ == "__main__":
    setup_logging("WARNING", "")
    success = inspect_database()
    print("\n" + "=" * 50)
    print("[READY] Backend store is ready" if success else "[FAILED] Backend store needs attention")
    sys.exit(0 if success else 1)
