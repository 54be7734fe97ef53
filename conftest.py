import os

# Tests run against throwaway SQLite files and never start the promoter loop
# unless a test does so explicitly.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PROMOTER_ENABLED", "false")
