import uvicorn

from imageproc.config import settings


def main() -> None:
    uvicorn.run("imageproc.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
