# run_local.py  (project root, next to conformance/): serve the harness page on the URL the suite expects
import logging

import uvicorn

from conformance.server import create_app
from conformance.settings import HarnessConfig

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    config = HarnessConfig.from_env()
    uvicorn.run(create_app(config), host=config.server_host, port=config.server_port)
