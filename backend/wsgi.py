# Overview: WSGI entry point for running the gift ledger API.

import os

from giftledger import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=int(os.environ.get("PORT", "3000")))
