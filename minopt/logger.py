"""Package-wide logger; minopt never installs handlers of its own."""
import logging

logger = logging.getLogger("minopt")
