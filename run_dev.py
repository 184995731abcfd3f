# run_dev.py
"""
Local development launcher for FastAPI.
Equivalent to: `uvicorn contentgen.app:app --reload --host 0.0.0.0 --port 8000`
"""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "contentgen.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
