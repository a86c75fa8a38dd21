"""
Run the photo booth backend as a module: python -m photobooth
"""
import uvicorn

from .config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("photobooth.main:app", host=settings.host, port=settings.port)
