"""
Colored logging utilities for the Hydra reference client.

This module provides colored console logging with component identification,
timestamps and sanitized key/value payloads, so the authorization code and
consent message flows between this app and the authorization server can be
followed from the terminal.
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from enum import Enum

from colorama import Fore, Style, init

init(autoreset=True)


class ComponentType(str, Enum):
    """Parties appearing in the message flow."""
    CLIENT = "CLIENT"
    CONSENT = "CONSENT"
    HYDRA_PUBLIC = "HYDRA-PUBLIC"
    HYDRA_ADMIN = "HYDRA-ADMIN"
    SYSTEM = "SYSTEM"


class MessageType(str, Enum):
    """Message types for logging."""
    ERROR = "ERROR"
    TOKEN_EXCHANGE = "TOKEN-EXCHANGE"
    CONSENT_DECISION = "CONSENT-DECISION"


# Keys whose values never reach the console
REDACTED_KEY_PARTS = ('password', 'secret', 'key', 'authorization', 'cookie')
# Keys whose values are cut to a short prefix
TRUNCATED_KEY_PARTS = ('token', 'code')
# Keys that look like the above but carry plain metadata
PLAIN_KEY_SUFFIXES = ('_endpoint', '_url', '_type', 'status_code')


class OAuthLogger:
    """
    Colored logger for OAuth2 message flows.

    Each message prints a header with source and destination, the message
    type and the sanitized payload. Errors are also sent to the standard
    library logger so they show up in the server log.
    """

    def __init__(self, component_name: str):
        """
        Initialize logger for a specific component.

        Args:
            component_name: Name of the component (CLIENT, CONSENT, etc.)
        """
        self.component_name = component_name.upper()
        self.colors = self._get_component_colors()

        self.logger = logging.getLogger(f"hydra_client.{component_name.lower()}")
        self.logger.setLevel(logging.INFO)

        # Avoid duplicate handlers when a component logger is created twice
        self.logger.handlers.clear()

        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _get_component_colors(self) -> Dict[str, str]:
        """Get color scheme for components and message types."""
        return {
            'CLIENT': Fore.BLUE + Style.BRIGHT,
            'CONSENT': Fore.CYAN + Style.BRIGHT,
            'HYDRA-PUBLIC': Fore.GREEN + Style.BRIGHT,
            'HYDRA-ADMIN': Fore.YELLOW + Style.BRIGHT,
            'SYSTEM': Fore.MAGENTA + Style.BRIGHT,
            'ERROR': Fore.RED + Style.BRIGHT,
            'SUCCESS': Fore.GREEN + Style.BRIGHT,
            'INFO': Fore.CYAN,
            'HEADER': Fore.WHITE + Style.BRIGHT,
            'SEPARATOR': Fore.WHITE + Style.DIM,
            'RESET': Style.RESET_ALL
        }

    def _format_timestamp(self) -> str:
        """Format current timestamp for log messages."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sanitize sensitive data for logging.

        Redacts secrets and credentials, and truncates tokens and
        authorization codes to their first 10 characters.
        """
        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()

            if key_lower.endswith(PLAIN_KEY_SUFFIXES):
                sanitized[key] = value
            elif any(part in key_lower for part in REDACTED_KEY_PARTS):
                sanitized[key] = '[REDACTED]'
            elif any(part in key_lower for part in TRUNCATED_KEY_PARTS):
                if isinstance(value, str) and len(value) > 10:
                    sanitized[key] = f"{value[:10]}..."
                else:
                    sanitized[key] = value
            else:
                sanitized[key] = value

        return sanitized

    def log_oauth_message(self,
                          source: str,
                          destination: str,
                          message_type: str,
                          data: Dict[str, Any],
                          success: bool = True):
        """
        Log a message between two parties with color coding.

        Args:
            source: Source component name
            destination: Destination component name
            message_type: Short title of the message
            data: Message data dictionary
            success: Whether the operation was successful
        """
        timestamp = self._format_timestamp()
        source_color = self.colors.get(source.upper(), self.colors['INFO'])
        dest_color = self.colors.get(destination.upper(), self.colors['INFO'])

        msg_color = self.colors['INFO'] if success else self.colors['ERROR']

        header = f"{self.colors['HEADER']}[{timestamp}] {source_color}{source}{self.colors['RESET']} → {dest_color}{destination}{self.colors['RESET']}"
        print(header)

        print(f"{msg_color}{message_type}:{self.colors['RESET']}")

        sanitized_data = self._sanitize_data(data)
        for key, value in sanitized_data.items():
            print(f"  {self.colors['INFO']}{key}:{self.colors['RESET']} {value}")

        print(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        print()

    def log_token_exchange(self, details: Dict[str, Any], success: bool = True):
        """
        Log the outcome of an authorization code exchange.

        Args:
            details: Exchange details (tokens are truncated)
            success: Whether the exchange succeeded
        """
        self.log_oauth_message(
            source=self.component_name,
            destination=ComponentType.HYDRA_PUBLIC.value,
            message_type=MessageType.TOKEN_EXCHANGE.value,
            data=details,
            success=success
        )

    def log_consent_decision(self,
                             consent_challenge: str,
                             decision: str,
                             details: Optional[Dict[str, Any]] = None):
        """
        Log the outcome of a consent workflow.

        Args:
            consent_challenge: Challenge the decision belongs to
            decision: Decision taken (display_ui, skip, accepted, rejected)
            details: Additional context
        """
        decision_data = {"consent_challenge": consent_challenge, "decision": decision}
        if details:
            decision_data.update(details)

        self.log_oauth_message(
            source=self.component_name,
            destination=ComponentType.HYDRA_ADMIN.value,
            message_type=MessageType.CONSENT_DECISION.value,
            data=decision_data
        )

    def log_http_request(self,
                         method: str,
                         url: str,
                         params: Optional[Dict[str, Any]] = None,
                         headers: Optional[Dict[str, str]] = None):
        """
        Log an outgoing HTTP request.

        Args:
            method: HTTP method
            url: Request URL
            params: Query parameters or form data
            headers: Request headers (sensitive headers will be redacted)
        """
        request_data = {
            "method": method,
            "url": url
        }

        if params:
            request_data["parameters"] = self._sanitize_data(params)

        if headers:
            safe_headers = {}
            for key, value in headers.items():
                if key.lower() in ['authorization', 'cookie', 'x-api-key']:
                    safe_headers[key] = '[REDACTED]'
                else:
                    safe_headers[key] = value
            request_data["headers"] = safe_headers

        self.log_oauth_message(
            source=self.component_name,
            destination="HTTP-SERVER",
            message_type="HTTP-REQUEST",
            data=request_data
        )

    def log_error(self,
                  error_type: str,
                  message: str,
                  details: Optional[Dict[str, Any]] = None):
        """
        Log error messages with context.

        Args:
            error_type: Type of error
            message: Error message
            details: Additional error context
        """
        error_data = {
            "error_type": error_type,
            "message": message
        }

        if details:
            error_data.update(details)

        self.log_oauth_message(
            source=self.component_name,
            destination="ERROR-HANDLER",
            message_type=MessageType.ERROR.value,
            data=error_data,
            success=False
        )
        self.logger.error("%s: %s %s", error_type, message, self._sanitize_data(details or {}))

    def log_startup(self, port: int, additional_info: Optional[Dict[str, Any]] = None):
        """
        Log component startup information.

        Args:
            port: Port number the component is running on
            additional_info: Additional startup information
        """
        print(f"{self.colors['SUCCESS']}🚀 {self.component_name} started on port {port}{self.colors['RESET']}")
        if additional_info:
            for key, value in self._sanitize_data(additional_info).items():
                print(f"   {key}: {value}")
        print(f"{self.colors['SEPARATOR']}{'-' * 60}{self.colors['RESET']}")
        print()


def create_logger(component_name: str) -> OAuthLogger:
    """
    Factory function to create logger instances.

    Args:
        component_name: Name of the component

    Returns:
        OAuthLogger: Configured logger instance
    """
    return OAuthLogger(component_name)
