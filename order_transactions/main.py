import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from order_transactions.config import Settings
from order_transactions.store import Store
from order_transactions.workflow import WorkflowRunner

logger = logging.getLogger(__name__)


async def main(settings: Settings, store: Optional[Store] = None) -> int:
    print("MongoDB Transactional Insert Demo")
    print("==================================")

    try:
        store = store or Store.connect(settings)
        await store.ping()
        if settings.reset:
            await store.reset()
        await WorkflowRunner(store).run()
    except Exception as e:
        logger.debug("Demo stopped by error", exc_info=True)
        print(f"Error: {e}")
        if e.__cause__ is not None:
            print(f"Inner Exception: {e.__cause__}")
        return 1
    finally:
        if store is not None:
            store.close()
    return 0


def run() -> None:
    exit_code = 1
    pause = True
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error: invalid configuration\n{e}")
    else:
        pause = settings.pause
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        exit_code = asyncio.run(main(settings))

    if pause and sys.stdin.isatty():
        input("\nPress Enter to exit...")
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
