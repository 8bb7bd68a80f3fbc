"""Integration tests for collection mode and the command line entry point."""
import json
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest
import requests
import responses

from app import App
from main import JsonFormatter, main, parse_args, setup_logging
from scraper.strava_auth import TOKEN_URL, AuthenticationError
from settings import Settings

BASE_URL = "https://www.strava.com/api/v3"
NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    club_config = tmp_path / 'club_config.json'
    club_config.write_text(json.dumps({
        'use_whitelist': True,
        'include_list': ['Rapha Berlin', 'Hamburg Riders'],
        'exclude_list': []
    }), encoding='utf-8')
    return Settings(
        client_id='id',
        client_secret='secret',
        refresh_token='refresh',
        output_dir=str(tmp_path / 'output'),
        club_config_path=str(club_config)
    )


@pytest.fixture
def mock_sleep():
    with patch('scraper.event_fetcher.asyncio.sleep', new_callable=AsyncMock) as sleep:
        yield sleep


def add_strava_responses():
    responses.add(responses.POST, TOKEN_URL, json={'access_token': 'tok'}, status=200)
    responses.add(
        responses.GET,
        f"{BASE_URL}/athlete/clubs",
        json=[
            {'id': 1, 'name': 'Rapha Berlin', 'member_count': 1200},
            {'id': 2, 'name': 'Hamburg Riders', 'member_count': 80},
            {'id': 3, 'name': 'Not Selected', 'member_count': 5}
        ]
    )
    responses.add(
        responses.GET,
        f"{BASE_URL}/clubs/1/group_events",
        json=[{
            'id': 10, 'title': 'Coffee Ride', 'club_id': 1,
            'description': 'Start at the Berlin clubhouse',
            'distance': 60000,
            'upcoming_occurrences': ['2024-05-04T09:00:00Z', '2024-05-11T09:00:00Z']
        }]
    )
    responses.add(
        responses.GET,
        f"{BASE_URL}/clubs/2/group_events",
        json={'message': 'Record Not Found'},
        status=404
    )


class TestApp:
    """Test cases for the collection run."""

    @responses.activate
    def test_successful_run_writes_files(self, settings, tmp_path, mock_sleep, capsys):
        """Test end-to-end collection against mocked Strava responses."""
        add_strava_responses()

        assert App(settings).run(now=NOW) is True

        output = tmp_path / 'output'
        city_records = json.loads(
            (output / 'berlin-events-2024-05-01.json').read_text(encoding='utf-8')
        )
        all_records = json.loads(
            (output / 'all-events-2024-05-01.json').read_text(encoding='utf-8')
        )
        assert [r['start_date'] for r in all_records] == [
            '2024-05-04T09:00:00Z', '2024-05-11T09:00:00Z'
        ]
        assert city_records == all_records
        assert all_records[0]['club_name'] == 'Rapha Berlin'

        printed = capsys.readouterr().out
        assert '===== Saturday, May 4, 2024 =====' in printed
        assert 'Coffee Ride' in printed

        requested = [call.request.url for call in responses.calls]
        assert f"{BASE_URL}/clubs/3/group_events" not in requested

    @responses.activate
    def test_no_city_events_still_saves_all_events(self, settings, tmp_path, mock_sleep):
        settings.filter_city = 'munich'
        add_strava_responses()

        assert App(settings).run(now=NOW) is True

        output = tmp_path / 'output'
        assert (output / 'all-events-2024-05-01.json').exists()
        assert not (output / 'munich-events-2024-05-01.json').exists()

    @patch('app.get_access_token')
    def test_authentication_failure(self, mock_get_token, settings, caplog):
        """Test that a failed token exchange fails the run with tips."""
        mock_get_token.side_effect = AuthenticationError('Missing required environment variables')

        with caplog.at_level(logging.INFO):
            assert App(settings).run(now=NOW) is False

        assert 'Troubleshooting tips:' in caplog.text
        assert 'refresh token is valid' in caplog.text

    @patch('app.StravaClient')
    @patch('app.get_access_token', return_value='tok')
    def test_directory_failure_logs_status(self, mock_get_token, mock_client_class,
                                           settings, caplog):
        """Test HTTP status details are logged on an API failure."""
        response = requests.Response()
        response.status_code = 429
        mock_client = Mock()
        mock_client.list_clubs.side_effect = requests.HTTPError('429', response=response)
        mock_client_class.return_value = mock_client

        with caplog.at_level(logging.INFO):
            assert App(settings).run(now=NOW) is False

        assert 'Status 429' in caplog.text


class TestMain:
    """Test cases for the command line entry point."""

    def test_parse_args(self):
        assert parse_args([]).server is False
        assert parse_args(['--server']).server is True
        assert parse_args(['-s']).server is True

    def test_unknown_flag_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(['--verbose'])

    @patch('main.setup_logging')
    @patch('main.App')
    def test_collection_mode_exit_codes(self, mock_app_class, mock_setup_logging):
        mock_app_class.return_value.run.return_value = True
        assert main([]) == 0

        mock_app_class.return_value.run.return_value = False
        assert main([]) == 1

    @patch('main.setup_logging')
    @patch('server.web.start_server')
    def test_server_mode(self, mock_start_server, mock_setup_logging):
        assert main(['--server']) == 0
        mock_start_server.assert_called_once()

    @patch('main.setup_logging')
    @patch('main.Settings.from_env', side_effect=ValueError('bad CONCURRENCY'))
    def test_uncaught_failure_exit_code(self, mock_from_env, mock_setup_logging):
        assert main([]) == 1


class TestLogging:
    """Test cases for the JSON log format."""

    def test_json_formatter_includes_extra_fields(self):
        record = logging.LogRecord('scraper', logging.INFO, __file__, 1,
                                   'Fetched %d events', (3,), None)
        record.club_id = 42

        data = json.loads(JsonFormatter().format(record))

        assert data['message'] == 'Fetched 3 events'
        assert data['level'] == 'INFO'
        assert data['logger'] == 'scraper'
        assert data['club_id'] == 42

    def test_setup_logging_sets_level(self):
        root_logger = logging.getLogger()
        original_handlers = root_logger.handlers[:]
        original_level = root_logger.level
        try:
            setup_logging('DEBUG')

            assert root_logger.level == logging.DEBUG
            assert len(root_logger.handlers) == 1
            assert isinstance(root_logger.handlers[0].formatter, JsonFormatter)
        finally:
            root_logger.handlers = original_handlers
            root_logger.setLevel(original_level)
