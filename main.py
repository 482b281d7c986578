# main.py

'''
Command-line chat loop for the clinical term analytics engine

This module implements:

1. Router construction:
   - Reads settings from the environment (.env supported) and wires the record store,
     chart renderer, image host and dialogue fallback into a ReplyRouter.

2. Interactive loop:
   - Each line typed is one message; the reply is printed as text, or as the image
     message that the messaging channel would receive.
   - "q", "quit" or "exit" ends the session.
'''

import json
import sys

from core.errors import ExternalServiceError
from core.settings import get_settings
from dispatcher import build_router
from helpers.reporter import normalize_reply

EXIT_WORDS = {"q", "quit", "exit"}


def run_cli() -> int:
    settings = get_settings()
    try:
        router = build_router(settings)
    except ExternalServiceError as exc:
        print(f"[ERROR] Could not start: {exc}")
        return 1

    print("Clinical term analytics chat. Type 'help' for usage, 'q' to quit.")
    while True:
        try:
            message = input("> ").strip()
        except EOFError:
            break
        if not message:
            continue
        if message.lower() in EXIT_WORDS:
            break
        reply = router.process_message(message)
        print(json.dumps(normalize_reply(reply), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(run_cli())
