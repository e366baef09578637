from dotenv import load_dotenv
load_dotenv()

import logging

import config
from analytics.runner import InteractionStatisticsRunner, summarize
from preprocessing.cleaner import Cleaner
from preprocessing.filters import UnnamedCommandFilter
from preprocessing.fixers import VersionControlEventSplitter
from preprocessing.runner import PreprocessingRunner

logger = logging.getLogger(__name__)


def configure_cleaner(cleaner: Cleaner) -> None:
    cleaner.add_filter(UnnamedCommandFilter())
    cleaner.add_fixer(VersionControlEventSplitter())


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    PreprocessingRunner(
        config.DIR_IN,
        config.DIR_OUT,
        num_workers=config.NUM_WORKERS,
        setup=configure_cleaner,
    ).run()

    if config.SKIP_STATISTICS:
        return

    results = InteractionStatisticsRunner(config.DIR_OUT, num_workers=config.NUM_WORKERS).run()
    logger.info("Statistics: %s", summarize(results))


if __name__ == "__main__":
    main()
