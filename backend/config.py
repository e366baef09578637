"""
Runtime configuration, read from the environment.

main.py loads a .env file (python-dotenv) before importing this module, so
any of these can be set there:

  FEEDBACK_DIR_IN=data/events-raw
  FEEDBACK_DIR_OUT=data/events
  FEEDBACK_NUM_WORKERS=8
  FEEDBACK_LOG_LEVEL=DEBUG
  FEEDBACK_SKIP_STATISTICS=1
"""

import os

DIR_IN = os.environ.get("FEEDBACK_DIR_IN", os.path.join("data", "events-raw"))
DIR_OUT = os.environ.get("FEEDBACK_DIR_OUT", os.path.join("data", "events"))

NUM_WORKERS = int(os.environ.get("FEEDBACK_NUM_WORKERS", os.cpu_count() or 1))

LOG_LEVEL = os.environ.get("FEEDBACK_LOG_LEVEL", "INFO").upper()

SKIP_STATISTICS = os.environ.get("FEEDBACK_SKIP_STATISTICS", "0") == "1"
