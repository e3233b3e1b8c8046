"""
reset_data.py
-------------
Clear every table of the local data store (data.pkl).

Meant for development. The next app start creates the default admin
account again; run `python seeds.py` for the demo data.
"""

import logging

from carhire.config import Config
from carhire.models.store import Store

logger = logging.getLogger("reset_data")


def main():
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    # No default admin here: the store should end up empty
    store = Store.instance(Config.DATA_PATH)
    store.clear()

    logger.info("%s has been cleared.", store.path)
    logger.info("Tip: run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
