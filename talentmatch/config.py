import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths (local development only)
DATA_DIR = Path("data")
DB_PATH = DATA_DIR / "talentmatch.db"

# Uploaded résumés and avatars live under this directory
ASSETS_DIR = Path(os.getenv("ASSETS_DIR", "assets"))

# Database (PostgreSQL in production, SQLite otherwise)
DATABASE_URL = os.getenv("DATABASE_URL")

# Embedding model (fastembed uses ONNX Runtime)
EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
EMBEDDING_DIMENSION = 384
EMBEDDING_TIMEOUT_SECONDS = float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "30"))

# LLM settings (Groq) for résumé analysis
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = "llama-3.3-70b-versatile"
LLM_TEMPERATURE = 0.0
ANALYSIS_TIMEOUT_SECONDS = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "120"))

# Ranking settings
MAX_CANDIDATE_POOL = 1000
RANKING_BATCH_SIZE = 100
RANKING_MAX_WORKERS = int(os.getenv("RANKING_MAX_WORKERS", "4"))
MIN_SIMILARITY_SCORE = 0.1
TOP_K_CANDIDATES = 10

# Résumé analysis settings
RESUME_PREVIEW_CHARS = 500
RAW_RESPONSE_PREVIEW_CHARS = 500

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
