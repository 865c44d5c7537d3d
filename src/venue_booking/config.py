"""
Runtime settings, read once from the environment.

A `.env` file in the working directory is loaded first, so local runs of the
worker and the client pick up the same values.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Temporal server the worker and client connect to.
TEMPORAL_ADDRESS = os.getenv("TEMPORAL_ADDRESS", "localhost:7233")

# Task queue name: a logical queue that connects clients to workers.
# The client specifies this when starting a workflow, and the worker
# specifies it when polling. They must match for work to be routed.
TASK_QUEUE = os.getenv("TEMPORAL_TASK_QUEUE", "venue-bookings")

# JSON file with venues and venue_discounts rows; empty store when unset.
VENUE_DATA_FILE = os.getenv("VENUE_DATA_FILE") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
