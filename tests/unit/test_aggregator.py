# tests/unit/test_aggregator.py
import threading

from portal.services.aggregator import fetch_with_fallback, gather
from portal.utils.api_request import APITimeoutError


def _boom():
    raise APITimeoutError("Request timed out after 8 seconds")


def test_live_value():
    result = fetch_with_fallback('x', lambda: {'a': 1}, {'fallback': True})
    assert result.value == {'a': 1}
    assert result.is_live is True
    assert result.error is None


def test_exception_uses_fallback_value():
    result = fetch_with_fallback('x', _boom, {'fallback': True})
    assert result.value == {'fallback': True}
    assert result.is_live is False
    assert 'timed out' in result.error


def test_none_counts_as_no_data():
    result = fetch_with_fallback('x', lambda: None, list)
    assert result.value == []
    assert result.is_live is False


def test_callable_fallback_only_called_on_failure():
    calls = []

    def fallback():
        calls.append(1)
        return 'fb'

    fetch_with_fallback('ok', lambda: 'live', fallback)
    assert calls == []
    assert fetch_with_fallback('bad', _boom, fallback).value == 'fb'
    assert calls == [1]


def test_gather_isolates_failures():
    results = gather({
        'weather': (lambda: 'sunny', 'fallback-weather'),
        'air': (_boom, 'fallback-air'),
    })
    assert results['weather'].value == 'sunny'
    assert results['weather'].is_live is True
    assert results['air'].value == 'fallback-air'
    assert results['air'].is_live is False


def test_gather_runs_concurrently():
    barrier = threading.Barrier(3, timeout=5)

    def wait():
        barrier.wait()
        return threading.current_thread().name

    results = gather({name: (wait, None) for name in ('a', 'b', 'c')})
    assert all(r.is_live for r in results.values())
    assert all(r.value.startswith('upstream') for r in results.values())


def test_gather_empty():
    assert gather({}) == {}
