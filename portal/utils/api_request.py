# portal/utils/api_request.py

import logging
import time
import requests

logger = logging.getLogger(__name__)

# Identifies the portal to public upstream APIs
USER_AGENT = 'Gemeindeportal/1.0'


class APIRequestError(Exception):
    """Base exception for API request errors"""
    def __init__(self, message, status_code=None, response=None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


class APITimeoutError(APIRequestError):
    """Exception raised when an API request times out"""
    pass


class APIRateLimitError(APIRequestError):
    """Exception raised when rate limited by the API"""
    pass


def safe_request(method, url, **kwargs):
    """
    Make a safe HTTP request with proper error handling

    Args:
        method: HTTP method (get, post, put, delete)
        url: Request URL
        **kwargs: Additional arguments for requests

    Returns:
        Response object

    Raises:
        APIRequestError: For request errors
        APITimeoutError: For timeout errors
        APIRateLimitError: For rate limit errors
    """
    # Every upstream call is bounded; there is no global deadline
    kwargs.setdefault('timeout', 10)
    headers = kwargs.setdefault('headers', {})
    headers.setdefault('User-Agent', USER_AGENT)

    # Track timing for logging
    start_time = time.time()

    try:
        response = requests.request(method, url, **kwargs)
        elapsed = time.time() - start_time

        logger.debug(f"{method.upper()} {url} completed in {elapsed:.2f}s with status {response.status_code}")

        if response.status_code == 429:
            raise APIRateLimitError(
                "Rate limit exceeded",
                status_code=response.status_code,
                response=response
            )

        if response.status_code >= 500:
            raise APIRequestError(
                f"Server error: {response.status_code}",
                status_code=response.status_code,
                response=response
            )

        if response.status_code >= 400:
            raise APIRequestError(
                f"Client error: {response.status_code}",
                status_code=response.status_code,
                response=response
            )

        return response

    except requests.Timeout:
        elapsed = time.time() - start_time
        logger.warning(f"{method.upper()} {url} timed out after {elapsed:.2f}s (limit {kwargs['timeout']}s)")
        raise APITimeoutError(f"Request timed out after {kwargs['timeout']} seconds")

    except requests.ConnectionError as e:
        logger.error(f"{method.upper()} {url} connection error: {str(e)}")
        raise APIRequestError(f"Connection error: {str(e)}")

    except requests.RequestException as e:
        logger.error(f"{method.upper()} {url} request error: {str(e)}")
        raise APIRequestError(f"Request error: {str(e)}")


def get_json(url, **kwargs):
    """GET ``url`` through :func:`safe_request` and decode the JSON body."""
    response = safe_request('get', url, **kwargs)
    try:
        return response.json()
    except ValueError as e:
        raise APIRequestError(f"Invalid JSON from {url}: {e}", status_code=response.status_code, response=response)
