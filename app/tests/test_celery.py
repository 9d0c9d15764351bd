"""
Test Celery tasks.
"""
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
import requests

from app.core.celery_config import STATS_QUEUE, celery_app
from app.tasks import record_hit_task


class TestCeleryTasks:
    """Test Celery task functionality."""

    def test_record_hit_task_sends_hit(self):
        """The task parses the timestamp and forwards the hit to the statistics client."""
        client = Mock()

        with patch("app.tasks.get_stats_client", return_value=client):
            # Call the task function directly (not through Celery)
            record_hit_task.run("ewm-service", "/events/1", "10.0.0.1", "2030-05-01 18:30:00")

        client.record_hit.assert_called_once_with(
            "ewm-service", "/events/1", "10.0.0.1", datetime(2030, 5, 1, 18, 30, 0)
        )

    def test_record_hit_task_retries_on_network_error(self):
        client = Mock()
        client.record_hit.side_effect = requests.ConnectionError("stats down")

        with patch("app.tasks.get_stats_client", return_value=client), patch.object(
            record_hit_task, "retry", side_effect=RuntimeError("retry scheduled")
        ) as retry:
            with pytest.raises(RuntimeError, match="retry scheduled"):
                record_hit_task.run("ewm-service", "/events", "10.0.0.1", "2030-05-01 18:30:00")

        retry.assert_called_once()
        assert isinstance(retry.call_args.kwargs["exc"], requests.ConnectionError)


class TestCeleryConfiguration:
    """Test Celery configuration."""

    def test_celery_app_exists(self):
        assert celery_app is not None
        assert celery_app.main == "ewm-service"

    def test_celery_serializer_config(self):
        assert celery_app.conf.task_serializer == "json"
        assert "json" in celery_app.conf.accept_content
        assert celery_app.conf.task_ignore_result is True

    def test_hits_routed_to_stats_queue(self):
        route = celery_app.conf.task_routes["app.tasks.record_hit_task"]
        assert route == {"queue": STATS_QUEUE}

    def test_task_registered(self):
        assert "app.tasks.record_hit_task" in celery_app.tasks
        assert record_hit_task.max_retries == 3
