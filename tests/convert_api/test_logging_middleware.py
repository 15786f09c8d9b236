"""Tests for LoggingMiddleware class."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import Request, Response

from convert_api.middleware.logging import REQUEST_ID_HEADER, LoggingMiddleware


class TestLoggingMiddleware:
    """Test cases for LoggingMiddleware."""

    @pytest.fixture
    def middleware(self):
        """Create LoggingMiddleware instance."""
        return LoggingMiddleware(Mock())

    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = Mock(spec=Request)
        request.method = "POST"
        request.url.path = "/convert"
        request.headers = {"user-agent": "pytest", "x-forwarded-for": "10.0.0.1, 10.0.0.2"}
        request.client = Mock(host="127.0.0.1")
        request.state = Mock()
        return request

    @pytest.fixture
    def mock_response(self):
        """Create mock response."""
        response = Mock(spec=Response)
        response.status_code = 400
        response.headers = {}
        return response

    async def test_dispatch_logs_completed_request(self, middleware, mock_request, mock_response):
        """Test a completed request is logged with its status code."""
        call_next = AsyncMock(return_value=mock_response)

        with patch("convert_api.middleware.logging.logger") as mock_logger:
            result = await middleware.dispatch(mock_request, call_next)

        assert result is mock_response
        call_next.assert_called_once_with(mock_request)

        mock_logger.bind.assert_called_once()
        bound = mock_logger.bind.return_value
        assert mock_logger.bind.call_args.kwargs["client_ip"] == "10.0.0.1"
        assert bound.info.call_args.kwargs["status_code"] == 400
        assert result.headers[REQUEST_ID_HEADER] == mock_request.state.request_id

    async def test_dispatch_logs_and_reraises_failure(self, middleware, mock_request):
        """Test an exception from downstream is logged and re-raised."""
        call_next = AsyncMock(side_effect=RuntimeError("boom"))

        with patch("convert_api.middleware.logging.logger") as mock_logger:
            with pytest.raises(RuntimeError, match="boom"):
                await middleware.dispatch(mock_request, call_next)

        bound = mock_logger.bind.return_value
        bound.error.assert_called_once()
        assert bound.error.call_args.kwargs["exc_info"] is True

    def test_get_client_ip_falls_back_to_client(self, middleware, mock_request):
        """Test the direct client address is used without forwarded headers."""
        mock_request.headers = {}

        assert middleware._get_client_ip(mock_request) == "127.0.0.1"

    def test_get_client_ip_unknown(self, middleware, mock_request):
        """Test a request without client information."""
        mock_request.headers = {}
        mock_request.client = None

        assert middleware._get_client_ip(mock_request) == "unknown"
