#!/usr/bin/env python
"""Script to run the Task Manager API server."""
import uvicorn

from app.config import DEBUG, HOST, PORT

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG
    )
