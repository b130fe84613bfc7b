"""Run the API server: python -m airsensor"""

import uvicorn
from dotenv import load_dotenv

from airsensor.config import configure_logging, get_server_address


def main():
    load_dotenv()
    configure_logging()
    host, port = get_server_address()
    uvicorn.run("airsensor.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
