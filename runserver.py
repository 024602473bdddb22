#project.runserver.py

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "src.registry.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "4000")),
        reload=os.environ.get("MODE", "development") == "development",
    )
