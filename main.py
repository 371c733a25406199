import logging

from bosun import *

logging.basicConfig(level=logging.WARNING, format="[%(asctime)s] %(levelname)s: %(message)s")
logging.captureWarnings(True)


@command(aliases=("gr",), flags=Flags("-u", params=("-n",), placeholders=("[name]",)), usage="[greeting]")
def greetf(event):
    """Greets somebody, optionally shouting."""
    if (params := event.resolve_params()) is None:
        return
    message = "%s, %s!" % (event.input.args or "Hello", params.get("-n", "stranger"))
    event.replyln(message.upper() if event.input.has("-u") else message)


if __name__ == '__main__':
    raise SystemExit(Shell([greetf], demos=True).serve())
