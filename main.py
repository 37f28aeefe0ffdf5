import uvicorn

from synesthesia import create_app
from synesthesia.config.config import Config

app = create_app()


if __name__ == "__main__":
    config = Config()

    uvicorn.run(
        "main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
        log_level="info",
        access_log=True,
    )
