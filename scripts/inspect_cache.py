import sys

from reskine.cache_db import MaxXSecCacheDB


def list_cache(db_path="reskine_cache.db", limit=50):
    db = MaxXSecCacheDB(db_path)
    rows = db.list_entries(limit=limit)

    print(f"=== Max xsec cache: {db_path} ({len(rows)} entries) ===")
    for row in rows:
        print(f"{row['fingerprint']:70s} max={row['max_xsec']:.4e}  E={row['energy']:.3f} GeV  [{row['timestamp']}]")


if __name__ == "__main__":
    list_cache(*sys.argv[1:2])
