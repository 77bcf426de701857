import os
import secrets
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent
DATA_PATH = Path(os.getenv("BLOG_DATA_PATH", BASE_DIR / "data" / "blog.json"))

# Document store
DATABASE_NAME = os.getenv("BLOG_DATABASE", "blog")
POSTS_COLLECTION = "posts"

# Auth / session
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "slateblog123")
# Valid for the lifetime of the process unless pinned in the environment.
SESSION_TOKEN = os.getenv("SESSION_TOKEN") or secrets.token_hex(16)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
