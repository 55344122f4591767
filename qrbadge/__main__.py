# =======================================================================================
# qrbadge/__main__.py - Run the API server
# =======================================================================================
import uvicorn

from .config import config


def main():
    uvicorn.run("qrbadge.main:app", host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    main()
