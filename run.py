import os
from urllib.parse import urlparse

import uvicorn
from dotenv import load_dotenv

load_dotenv()

LOCAL_URL = os.getenv("LOCAL_URL", "http://127.0.0.1:8000")

if __name__ == '__main__':
    parsed_url = urlparse(LOCAL_URL)
    host = parsed_url.hostname or "127.0.0.1"
    port = parsed_url.port or 8000

    print(f"Server running at: {LOCAL_URL}")
    uvicorn.run("erp_ledger.main:app", host=host, port=port, reload=True)
