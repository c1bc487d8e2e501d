import os
import sys
import sqlite3
import requests
from dotenv import load_dotenv

def print_status(check_name: str, status: bool, details: str = ""):
    """
    Renders the status of a health system check to the console.

    Args:
        check_name: Human-readable identifier for the check.
        status: Boolean indicating success or failure.
        details: Optional supplementary information (e.g., file paths, URLs).
    """
    color = "\033[92m[OK]\033[0m" if status else "\033[91m[FAIL]\033[0m"
    print(f"{color} {check_name:<30} {details}")

def run_healthcheck():
    """
    Verifies the storefront environment: configuration, database schema and
    the postal code provider.
    """
    print("\n=== Storefront Health Verification ===\n")

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env_path = os.path.join(base_dir, ".env")

    # 1. Check .env file (optional, every setting has a default)
    has_env = os.path.exists(env_path)
    print_status(".env file exists", True, env_path if has_env else "Not found, using defaults")
    if has_env:
        load_dotenv(env_path)

    # 2. Show effective settings
    for v in ['DATABASE_URL', 'MIN_ITEMS_FOR_CHECKOUT', 'PRICE_FACTOR', 'ADMIN_EMAILS']:
        val = os.environ.get(v)
        print_status(f"Env var: {v}", True, val if val else "default")

    # 3. Check Database
    db_path = os.getenv("DATABASE_URL", "sqlite:///storefront.db").replace("sqlite:///", "")
    if db_path.startswith('/'): # Absolute path
        db_full_path = db_path
    else:
        db_full_path = os.path.join(base_dir, db_path)

    has_db = os.path.exists(db_full_path)
    print_status("Database file exists", has_db, db_full_path)
    if has_db:
        try:
            conn = sqlite3.connect(db_full_path)
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            tables = [r[0] for r in cursor.fetchall()]
            required_tables = ['leagues', 'teams', 'product_stock', 'profiles', 'cart_items', 'orders']
            has_tables = all(t in tables for t in required_tables)
            print_status("Database schema initialized", has_tables, f"Found {len(tables)} tables")
            if 'teams' in tables:
                cursor.execute("SELECT COUNT(*) FROM teams;")
                team_count = cursor.fetchone()[0]
                print_status("Catalog populated", team_count > 0, f"{team_count} teams")
            conn.close()
        except Exception as e:
            print_status("Database query failed", False, str(e))
    else:
        print_status("Database schema initialized", False, "DB file missing")
        sys.exit(1)

    # 4. Postal code provider
    url = os.environ.get("VIACEP_URL", "https://viacep.com.br/ws/{cep}/json/").format(cep="01001000")
    try:
        r = requests.get(url, timeout=5)
        print_status("ViaCEP connection", r.status_code == 200, f"HTTP {r.status_code}")
    except Exception as e:
        print_status("ViaCEP connection", False, str(e))

    print("\nHealth check completed.")

if __name__ == "__main__":
    run_healthcheck()
