#!/usr/bin/env python
"""
Development server with auto-reload on changes under cafeshift/.
"""
import uvicorn
from pathlib import Path

if __name__ == "__main__":
    package_dir = Path(__file__).parent.absolute() / "cafeshift"

    uvicorn.run(
        "cafeshift.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=[str(package_dir)],
        reload_includes=["*.py"],
        reload_excludes=["*.pyc", "__pycache__", "*.log"],
        reload_delay=0.25,
        log_level="info",
    )
