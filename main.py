"""
Entry point for the vocab-srs service.

Run with:
    uvicorn main:app --reload --port 3000
    python main.py
"""
import sys
from pathlib import Path

# config.py lives at the project root
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn
from config import get_settings
from vocab_srs.api.main import app  # noqa: F401  (uvicorn main:app)

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "vocab_srs.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.enable_dev_routes,
        log_level=settings.log_level.lower(),
    )
