import uvicorn

from calfeed.core.config import settings


def main() -> None:
    uvicorn.run("calfeed.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
