import logging
from datetime import datetime

import requests

from app.core.celery_config import celery_app
from app.services.stats import DATE_FORMAT, get_stats_client

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=5)
def record_hit_task(self, app: str, uri: str, ip: str, timestamp: str):
    """Send an endpoint hit to the statistics service, retrying on network errors."""
    client = get_stats_client()
    try:
        client.record_hit(app, uri, ip, datetime.strptime(timestamp, DATE_FORMAT))
    except requests.RequestException as e:
        logger.warning(f"Could not record hit for {uri}: {e}")
        raise self.retry(exc=e)
