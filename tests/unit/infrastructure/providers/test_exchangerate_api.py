# nosec B101


import pytest
from datetime import UTC, datetime
from unittest.mock import Mock, AsyncMock

import httpx
from tenacity import wait_none

from infrastructure.providers.exchangerate_api import (
    ExchangeRateAPIProvider,
    parse_provider_timestamp,
)
from domain.exceptions.currency import FetchError
from domain.models.result import Err, Ok

FETCHED_AT = datetime(2025, 11, 5, 10, 30, 0, tzinfo=UTC)


def make_provider(client, max_attempts=1):
    return ExchangeRateAPIProvider(
        client=client,
        max_attempts=max_attempts,
        retry_wait=wait_none(),
        clock=lambda: FETCHED_AT,
    )


def json_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


# ============================================================================
# TEST: fetch() - Success Scenarios
# ============================================================================

@pytest.mark.asyncio
async def test_fetch_success_returns_snapshot():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response({
        'base': 'USD',
        'date': '2025-11-05',
        'time_last_updated': 1762300801,
        'rates': {'USD': 1, 'EUR': 0.92, 'JPY': 149.5},
    })

    provider = make_provider(mock_client)
    result = await provider.fetch('USD')

    assert isinstance(result, Ok)
    snapshot = result.value
    assert snapshot.base_currency == 'USD'
    assert snapshot.rates == {'EUR': 0.92, 'JPY': 149.5}
    assert snapshot.timestamp == FETCHED_AT
    assert snapshot.provider_timestamp == datetime(2025, 11, 5, 0, 0, 1, tzinfo=UTC)
    mock_client.get.assert_called_once_with('https://api.exchangerate-api.com/v4/latest/USD')


@pytest.mark.asyncio
async def test_fetch_without_provider_timestamp_uses_fetch_time_only():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response({'rates': {'GBP': 0.79}})

    provider = make_provider(mock_client)
    result = await provider.fetch('EUR')

    assert result.value.base_currency == 'EUR'
    assert result.value.timestamp == FETCHED_AT
    assert result.value.provider_timestamp is None


@pytest.mark.asyncio
async def test_custom_base_url_gets_trailing_slash():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response({'rates': {'EUR': 0.92}})

    provider = ExchangeRateAPIProvider(base_url='http://rates.local/latest', client=mock_client)
    await provider.fetch('USD')

    mock_client.get.assert_called_once_with('http://rates.local/latest/USD')


# ============================================================================
# TEST: fetch() - Failures map to Err(FetchError)
# ============================================================================

@pytest.mark.asyncio
async def test_fetch_http_500_error():
    mock_client = AsyncMock(spec=httpx.AsyncClient)

    error_response = Mock()
    error_response.status_code = 500
    error_response.text = 'Internal Server Error'

    mock_client.get.side_effect = httpx.HTTPStatusError(
        'Server error',
        request=Mock(),
        response=error_response
    )

    result = await make_provider(mock_client).fetch('USD')

    assert isinstance(result, Err)
    assert isinstance(result.error, FetchError)
    assert 'HTTP error 500' in str(result.error)


@pytest.mark.asyncio
async def test_fetch_http_404_unknown_base():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    response = Mock()
    response.status_code = 404
    response.text = 'Not Found'
    response.raise_for_status.side_effect = httpx.HTTPStatusError(
        'Not found', request=Mock(), response=response
    )
    mock_client.get.return_value = response

    result = await make_provider(mock_client).fetch('XYZ')

    assert isinstance(result, Err)
    assert '404' in str(result.error)


@pytest.mark.asyncio
async def test_fetch_network_timeout():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = httpx.TimeoutException('Request timed out')

    result = await make_provider(mock_client).fetch('USD')

    assert isinstance(result, Err)
    assert 'request failed' in str(result.error).lower()


@pytest.mark.asyncio
async def test_fetch_retries_transient_errors():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = [
        httpx.ConnectError('Connection refused'),
        httpx.ConnectError('Connection refused'),
        json_response({'rates': {'EUR': 0.92}}),
    ]

    result = await make_provider(mock_client, max_attempts=3).fetch('USD')

    assert isinstance(result, Ok)
    assert mock_client.get.call_count == 3


@pytest.mark.asyncio
async def test_fetch_gives_up_after_max_attempts():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = httpx.ConnectError('Connection refused')

    result = await make_provider(mock_client, max_attempts=2).fetch('USD')

    assert isinstance(result, Err)
    assert 'ConnectError' in str(result.error)
    assert mock_client.get.call_count == 2


@pytest.mark.asyncio
async def test_fetch_does_not_retry_http_errors():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    error_response = Mock()
    error_response.status_code = 503
    error_response.text = 'Unavailable'
    mock_client.get.side_effect = httpx.HTTPStatusError(
        'Unavailable', request=Mock(), response=error_response
    )

    await make_provider(mock_client, max_attempts=3).fetch('USD')

    assert mock_client.get.call_count == 1


@pytest.mark.asyncio
async def test_fetch_invalid_json_response():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_response = Mock()
    mock_response.raise_for_status = Mock()
    mock_response.json.side_effect = ValueError('Invalid JSON')
    mock_client.get.return_value = mock_response

    result = await make_provider(mock_client).fetch('USD')

    assert isinstance(result, Err)
    assert 'parsing error' in str(result.error).lower()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    'payload, message',
    [
        ({'result': 'error'}, 'Missing rates for USD'),
        ({'rates': {}}, 'Missing rates for USD'),
        ({'rates': ['EUR']}, 'Missing rates for USD'),
        ({'rates': {'EUR': -0.92}}, 'Invalid rates for USD'),
        ({'rates': {'EUR': 'n/a'}}, 'Invalid rates for USD'),
        ({'base': 'EUR', 'rates': {'USD': 1.08}}, 'received EUR'),
        (['not', 'an', 'object'], 'payload is not an object'),
    ],
)
async def test_fetch_malformed_payload(payload, message):
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.return_value = json_response(payload)

    result = await make_provider(mock_client).fetch('USD')

    assert isinstance(result, Err)
    assert message in str(result.error)


@pytest.mark.asyncio
async def test_close_closes_client():
    mock_client = AsyncMock(spec=httpx.AsyncClient)

    await make_provider(mock_client).close()

    mock_client.aclose.assert_called_once()


# ============================================================================
# TEST: Provider timestamps
# ============================================================================

@pytest.mark.parametrize(
    'value, expected',
    [
        (1762300801, datetime(2025, 11, 5, 0, 0, 1, tzinfo=UTC)),
        ('2025-11-05T00:00:01+00:00', datetime(2025, 11, 5, 0, 0, 1, tzinfo=UTC)),
        ('2025-11-05T00:00:01', datetime(2025, 11, 5, 0, 0, 1, tzinfo=UTC)),
        (None, None),
        ('not a date', None),
        (True, None),
    ],
)
def test_parse_provider_timestamp(value, expected):
    assert parse_provider_timestamp(value) == expected
