#!/usr/bin/env python3
"""Check the .env file and the resolved settings before starting the API."""

from pathlib import Path
import sys

ENV_TEMPLATE = """# Document store: supabase (default) or memory for local runs without a database
RASOAT_STORE_BACKEND=supabase

# Supabase Configuration (required when RASOAT_STORE_BACKEND=supabase)
# Get these from: https://supabase.com/dashboard -> Your Project -> Settings -> API
RASOAT_SUPABASE_URL=https://your-project-id.supabase.co
RASOAT_SUPABASE_KEY=your-service-role-key-here

# Tables (defaults shown)
# RASOAT_TEMPORARY_COLLECTION=tam_tru_records
# RASOAT_PERMANENT_COLLECTION=thuong_tru_records
# RASOAT_LEGACY_COLLECTION=verification_records

# Accounts allowed to list, delete and export records (JSON array or comma-separated)
RASOAT_AUTHORIZED_EMAILS=phanminhdai.it@gmail.com

# API Configuration
RASOAT_API_PREFIX=/api
RASOAT_TIMEZONE=Asia/Ho_Chi_Minh
# RASOAT_FRONTEND_ALLOWED_ORIGINS=http://localhost:3000,http://127.0.0.1:3000
"""


def _mask(value: str) -> str:
    return value if len(value) <= 30 else f"{value[:20]}...{value[-6:]}"


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Residence review API - environment check")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"❌ .env file NOT found, created a template at: {env_file}")
        print("⚠️  Edit it and fill in your Supabase credentials, then run this script again.")
        return

    print(f"✅ Found .env file at: {env_file}")
    for line in env_file.read_text(encoding="utf-8").splitlines():
        if line.startswith("RASOAT_SUPABASE_KEY=") and "=" in line:
            name, value = line.split("=", 1)
            print(f"   {name}={_mask(value.strip())}")
        elif line and not line.startswith("#"):
            print(f"   {line}")
    print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from rasoat.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    print(f"Store backend:        {settings.store_backend}")
    print(f"Collections:          {settings.temporary_collection}, {settings.permanent_collection}")
    print(f"Legacy collection:    {settings.legacy_collection} (merged for {', '.join(settings.legacy_record_types) or 'none'})")
    print(f"Authorized accounts:  {', '.join(settings.authorized_emails) or 'none'}")
    print(f"Region reference:     {settings.regions_file} ({'found' if settings.regions_file.exists() else 'missing'})")
    print()

    if settings.store_backend == "memory":
        print("⚠️  In-memory store selected: records are lost when the server stops.")
    elif settings.supabase_url and settings.supabase_key:
        print("=" * 60)
        print("✅ SUCCESS: Supabase is configured!")
        print("=" * 60)
    else:
        print("=" * 60)
        print("❌ ERROR: Supabase is NOT configured")
        print("=" * 60)
        print("1. Make sure variables start with the RASOAT_ prefix")
        print("2. Make sure there are no spaces around the = sign")
        print("3. Restart the backend after editing .env")


if __name__ == "__main__":
    main()
