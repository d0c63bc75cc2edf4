"""One module per operation. Each exposes `async def main(settings, ...) -> dict`."""
