"""
Unit tests for queue settings checks.
"""
import pytest

from supply_chain.config import QueueSettings
from supply_chain.domain.exceptions import ConfigurationError


@pytest.mark.unit
class TestQueueSettingsTimeouts:
    """Tests for QueueSettings.check_timeouts."""

    def test_defaults_are_accepted(self):
        QueueSettings().check_timeouts()

    def test_collaborator_timeout_at_interval_is_rejected(self):
        settings = QueueSettings(processing_interval_seconds=10, collaborator_timeout_seconds=10, command_timeout_seconds=5)

        with pytest.raises(ConfigurationError, match="Collaborator timeout"):
            settings.check_timeouts()

    def test_command_timeout_above_interval_is_rejected(self):
        settings = QueueSettings(processing_interval_seconds=10, collaborator_timeout_seconds=2, command_timeout_seconds=15)

        with pytest.raises(ConfigurationError, match="Command timeout"):
            settings.check_timeouts()
