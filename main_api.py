# main_api.py
import uvicorn

from api.garden_api import app

if __name__ == "__main__":
    uvicorn.run(
        "main_api:app",
        host="0.0.0.0",
        port=8000,
        reload=True       # Useful in dev, remove in production
    )
